"""Error taxonomy shared by the capture, session and composition layers."""


class PhotostripError(RuntimeError):
    """Base class for every error raised by photostrip."""


class UnknownLayout(PhotostripError, KeyError):
    """Layout identifier is not present in the catalog."""

    def __init__(self, layout_id):
        self.layout_id = layout_id
        super().__init__(f"Unknown layout: {layout_id!r}")

    def __str__(self):
        # KeyError would otherwise repr() the message
        return self.args[0]


class SourceNotReady(PhotostripError):
    """Video source is not streaming or does not report its resolution yet."""


class CaptureFailed(PhotostripError):
    """The video source or the encoder did not produce a usable still."""


class IncompleteSession(PhotostripError):
    """Composition was requested before the buffer holds every pose."""

    def __init__(self, have: int, need: int):
        self.have = have
        self.need = need
        super().__init__(f"Session incomplete: {have}/{need} poses captured")
