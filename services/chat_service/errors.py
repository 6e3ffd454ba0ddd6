"""
Errors raised when a caller addresses a thread or message the store does not hold.
"""


class UnknownThreadError(LookupError):
    def __init__(self, thread_id: str):
        super().__init__(f"Unknown thread: {thread_id}")
        self.thread_id = thread_id


class UnknownMessageError(LookupError):
    def __init__(self, thread_id: str, message_id: str):
        super().__init__(f"Unknown message {message_id} in thread {thread_id}")
        self.thread_id = thread_id
        self.message_id = message_id
