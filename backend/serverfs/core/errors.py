"""Error kinds raised by filesystem operations.

OS-level failures (missing files, permissions, full disks, existing
destinations) are not wrapped; they surface as the builtin OSError subclasses.
"""


class FileSystemError(Exception):
    pass


class PathViolation(FileSystemError):
    """A path escapes the sandbox or would be nested inside itself."""


class SelfMove(PathViolation):
    def __init__(self, message: str = "You cannot move a file or folder into itself."):
        super().__init__(message)


class SelfCompress(PathViolation):
    def __init__(self, message: str = "Unable to compress folder into itself."):
        super().__init__(message)


class UnsafeArchiveEntry(PathViolation):
    pass


class NotAFile(FileSystemError):
    def __init__(self, message: str = "The file requested does not appear to be a file."):
        super().__init__(message)


class NotADirectory(FileSystemError):
    def __init__(self, message: str = "The path requested is not a valid directory on the system."):
        super().__init__(message)


class TooLarge(FileSystemError):
    def __init__(self, message: str = "This file is too large to open."):
        super().__init__(message)


class ProtectedPath(FileSystemError):
    def __init__(self, message: str = "You cannot delete your home folder."):
        super().__init__(message)


class TypeMismatch(FileSystemError):
    def __init__(
        self,
        message: str = "Values passed to move function must be of the same type (path, path) or (list, list).",
    ):
        super().__init__(message)


class LengthMismatch(FileSystemError):
    def __init__(
        self,
        message: str = "The number of starting values does not match the number of ending values.",
    ):
        super().__init__(message)


class InvalidArgumentType(FileSystemError):
    pass


class NoValidEntries(FileSystemError):
    def __init__(self, message: str = "None of the files passed to the command were valid."):
        super().__init__(message)


class UnsupportedArchive(FileSystemError):
    pass
