"""Exception hierarchy for the story pipeline."""


class StoryError(Exception):
    """Base class for every failure the pipeline reports to the user."""


class SessionError(StoryError):
    """Persona or thread creation failed, or no thread is available."""


class RemoteCallError(StoryError):
    """A remote service returned an error or an unusable response."""


class PollTimeoutError(RemoteCallError):
    """A run did not reach a terminal state within the polling bound."""


class SchemaMismatchError(StoryError):
    """A structured response is missing keys or has the wrong arity."""


class MalformedResponse(SchemaMismatchError):
    """The writer payload could not be parsed into a list of phrases."""


class PersistenceError(StoryError):
    """Local state could not be serialized or deserialized."""


class OperationCancelled(StoryError):
    """The surrounding cycle was cancelled while waiting on a remote call."""


class PartialTranslationFailure(StoryError):
    """One or more sentence translations failed while others succeeded."""

    def __init__(self, message: str, failed_sentences: list[int]):
        super().__init__(message)
        self.failed_sentences = failed_sentences
