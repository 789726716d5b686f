"""Output formatting: JSON, quiet, and Rich renderings of ServiceResult."""
