"""Comment classification/attachment and whitespace retention."""

from gmlfront.comments.attach import LEADING, TRAILING, attach_comments, find_neighbours, is_doc_marker

__all__ = ["attach_comments", "find_neighbours", "is_doc_marker", "LEADING", "TRAILING"]
