from .merger import SourceContribution, combine_schemas, merge_contributions

__all__ = ["SourceContribution", "combine_schemas", "merge_contributions"]
