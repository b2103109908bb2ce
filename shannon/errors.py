#  Copyright (c) Kuba Szczodrzyński 2021-5-5.


class ShannonError(Exception):
    pass


class KeyNotSetError(ShannonError):
    def __init__(self, operation: str) -> None:
        super().__init__("Cannot {} before a key has been set".format(operation))
        self.operation = operation


class SessionFinishedError(ShannonError):
    def __init__(self, operation: str) -> None:
        super().__init__(
            "Cannot {} after finish; set a new key or nonce first".format(operation)
        )
        self.operation = operation


class BufferLengthError(ShannonError, ValueError):
    def __init__(self, length: int, capacity: int) -> None:
        super().__init__(
            "Requested length {} does not fit a buffer of {} bytes".format(
                length, capacity
            )
        )
        self.length = length
        self.capacity = capacity
