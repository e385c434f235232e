from .comparator import ContentComparator, compare_content, normalize

__all__ = ["ContentComparator", "compare_content", "normalize"]
