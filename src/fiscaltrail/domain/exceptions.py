"""Domain exceptions raised by collaborators of the reconstruction engine."""


class ReconstructionError(Exception):
    """Base exception for fiscal reconstruction errors."""


class StoreError(ReconstructionError):
    """Raised when the data store cannot be read or written."""


class RentScheduleError(ReconstructionError):
    """Raised when a contract's rent schedule cannot be derived."""

    def __init__(self, contract_id: int, message: str):
        self.contract_id = contract_id
        super().__init__(f"Rent schedule for contract {contract_id}: {message}")


class FiscalSummaryError(ReconstructionError):
    """Raised when a fiscal summary cannot be recomputed."""

    def __init__(self, property_id: int, year: int, message: str):
        self.property_id = property_id
        self.year = year
        super().__init__(
            f"Fiscal summary {year} for property {property_id}: {message}"
        )


class CarryForwardError(ReconstructionError):
    """Raised when the carryforward chain cannot be recomputed."""

    def __init__(self, property_id: int, message: str):
        self.property_id = property_id
        super().__init__(f"Carryforwards for property {property_id}: {message}")
