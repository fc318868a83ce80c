from .inference import FieldTypeInferencer, FieldValueRow, infer_type_from_name, refine_field_types

__all__ = ["FieldTypeInferencer", "FieldValueRow", "infer_type_from_name", "refine_field_types"]
