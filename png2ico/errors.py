"""
Exceptions raised while turning a source image into an .ico file.
Each one records which file and which stage of the conversion failed.
"""


class IconError(Exception):
    """Base class for conversion failures."""

    stage = None

    def __init__(self, message, path=None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self):
        parts = []
        if self.stage:
            parts.append(self.stage)
        if self.path is not None:
            parts.append(str(self.path))
        if parts:
            return f"[{': '.join(parts)}] {self.message}"
        return self.message


class DecodeError(IconError):
    """The source image could not be opened or decoded."""

    stage = 'decode'


class EncodeError(IconError):
    """A bitmap, mask or container could not be built."""

    stage = 'encode'


class WriteError(IconError):
    """The finished .ico could not be written to disk."""

    stage = 'write'
