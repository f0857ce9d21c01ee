"""Source parsers used to extract declarations from fetched files."""

from .java import JavaAnnotation, JavaCompilationUnit, JavaMethod, JavaSourceParser

__all__ = ["JavaAnnotation", "JavaCompilationUnit", "JavaMethod", "JavaSourceParser"]
