class HufError(ValueError):
    """Base error; subclasses ValueError so plain `except ValueError` still works."""


class MalformedArtifactError(HufError):
    pass


class NamingConventionError(HufError):
    pass


class EncodingError(HufError):
    pass
