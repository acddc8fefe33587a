"""Domain exceptions raised by the services and mapped to HTTP errors in create_app."""


class SchoolKpiError(Exception):
    status_code = 400

    def __init__(self, message, status_code=None, **details):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self):
        out = {"error": self.message}
        out.update(self.details)
        return out


class DataUnavailable(SchoolKpiError):
    """A row the scoring engine needs (teacher, KPI, job type) could not be read."""
    status_code = 404


class IncompleteTeacher(DataUnavailable):
    """Teacher exists but has no job type or school assigned."""
    status_code = 400


class SubmissionError(SchoolKpiError):
    pass


class ReviewError(SchoolKpiError):
    status_code = 409


class WeightError(SchoolKpiError):
    pass


class TeacherError(SchoolKpiError):
    """Bad teacher account data from a school manager (duplicate email, unknown job type)."""
    pass
