"""Domain exceptions."""


class ProtocolViolation(Exception):
    """Interaction payload is missing data the command's own schema guarantees.

    Raised for message commands without a resolved target message or without
    an identifiable invoking user. The invocation is aborted and no response
    is sent.
    """
