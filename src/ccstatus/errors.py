class TranscriptError(Exception):
    """
    TranscriptError is the base class for every failure
    raised while loading transcripts.
    """

    def __init__(self, message: "str", path: "str" = "") -> "None":
        super().__init__(f"{message}: {path}" if path else message)
        self.path = path


class ConfigurationError(TranscriptError):
    """
    the transcripts directory could not be resolved.
    """


class TranscriptReadError(TranscriptError):
    """
    walking the transcripts directory or opening a file failed.
    """


class TranscriptDecodeError(TranscriptError):
    """
    a transcript file holds a malformed record before its last line.
    """

    def __init__(self, message: "str", path: "str" = "", line: "int" = 0) -> "None":
        if line:
            message = f"{message} (line {line})"
        super().__init__(message, path)
        self.line = line
