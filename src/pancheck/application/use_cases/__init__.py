from .check_links import BatchReport, CheckLinksUseCase

__all__ = ["BatchReport", "CheckLinksUseCase"]
