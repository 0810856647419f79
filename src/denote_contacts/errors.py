"""Exception hierarchy for denote-contacts."""


class DenoteContactsError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(DenoteContactsError):
    """Configuration could not be resolved. Fatal at startup."""


class ContactsDirectoryError(DenoteContactsError):
    """The contacts root is missing, not a directory, or unreadable."""


class ContactParseError(DenoteContactsError):
    """A file could not be read as a contact record."""


class MalformedRecordError(ContactParseError):
    """The file has no usable frontmatter header."""


class NotAContactError(ContactParseError):
    """The header parsed but the tag set lacks the contact marker."""


class ContactSaveError(DenoteContactsError):
    """Writing or reloading a contact failed."""


class TaskCreationError(DenoteContactsError):
    """A follow-up task could not be written. Never fatal for the contact save."""
