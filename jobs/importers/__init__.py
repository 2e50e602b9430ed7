from jobs.importers.base import FetchedJob, JobImporter, JobImportError, ValidationResult
from jobs.importers.greenhouse import GreenhouseImporter
from jobs.importers.lever import LeverImporter

IMPORTERS = {
    importer.source_type: importer
    for importer in (GreenhouseImporter(), LeverImporter())
}


def get_importer(source_type: str) -> JobImporter:
    """
    Importer for an ATS source type.

    Raises:
        ValueError: no importer handles ``source_type``
    """
    try:
        return IMPORTERS[source_type]
    except KeyError:
        raise ValueError(
            f"Unsupported job source type: {source_type}. "
            f"Supported types: {', '.join(sorted(IMPORTERS))}"
        ) from None


def has_importer(source_type: str) -> bool:
    return source_type in IMPORTERS


__all__ = [
    "FetchedJob",
    "JobImporter",
    "JobImportError",
    "ValidationResult",
    "get_importer",
    "has_importer",
]
