"""Exception hierarchy for vacuum."""


class VacuumError(Exception):
    """Base exception for vacuum."""


class ConfigError(VacuumError):
    """Configuration file cannot be read, parsed or validated."""


class LedgerError(VacuumError):
    """Witness ledger cannot be written."""


class QueryError(VacuumError):
    """Witness query arguments are invalid."""
