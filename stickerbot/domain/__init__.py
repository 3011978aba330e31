"""
This package contains the core domain models of the Sticker Bot.

Modules:
    exceptions.py: The typed error taxonomy. Every error may carry a short
                   user-facing message next to its detailed internal cause.
    blob.py: `Blob`, the immutable bytes-plus-extension unit produced by the
             converters, and `NamedOutput`, its transport-ready form.
    request.py: `Operation`, `MediaRequest`, `FileRef` and `ReplyContext`,
                describing what to convert and where to answer.
    temp_models.py: Temporary files that are removed when their scope ends.
"""
