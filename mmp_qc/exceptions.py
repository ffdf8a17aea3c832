class RecordShapeError(Exception):
    pass


class UnknownFieldError(KeyError):
    pass


class DuplicateTimeStampError(Exception):
    pass


class StoreNotFoundError(Exception):
    pass
