# utils/errors.py
# Business-rule failures. They subclass ValueError so callers that already
# handle the DAO layer's ValueError keep working; routes map them to 4xx.


class BusinessRuleError(ValueError):
    status_code = 409


class JobNotFound(BusinessRuleError):
    status_code = 404

    def __init__(self, job_id: int):
        super().__init__(f"Supplier job #{job_id} not found.")
        self.job_id = job_id


class JobAlreadyCancelled(BusinessRuleError):
    def __init__(self, job_id: int):
        super().__init__(f"Supplier job #{job_id} is already cancelled.")
        self.job_id = job_id


class CancellationNotAllowed(BusinessRuleError):
    def __init__(self, message: str = "Cannot cancel after supplier acceptance."):
        super().__init__(message)


class NoActiveJobs(BusinessRuleError):
    def __init__(self, quote_id: int):
        super().__init__(f"No active supplier jobs for quote #{quote_id}.")
        self.quote_id = quote_id


class InvalidJobTransition(BusinessRuleError):
    def __init__(self, job_id: int, current: str, target: str):
        super().__init__(
            f"Supplier job #{job_id} cannot move from {current} to {target}."
        )
        self.job_id = job_id


class ItemAlreadyAssigned(BusinessRuleError):
    def __init__(self, item_id: int, job_id: int):
        super().__init__(
            f"Item #{item_id} already has active supplier job #{job_id}; cancel it first."
        )
        self.item_id = item_id
        self.job_id = job_id


class QuoteNotAssignable(BusinessRuleError):
    def __init__(self, quote_id: int, status: str):
        super().__init__(f"Quote #{quote_id} is {status} and cannot take supplier assignments.")
        self.quote_id = quote_id
