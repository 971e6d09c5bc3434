"""
Change signals for challenges and friendships.

Publishers send after their batch has committed:

    challenge_sent.send(challenge, recipient_ids=[...])

Consumers that only care while some context is alive take a ``Subscription``
from ``subscribe`` and close it when that context goes away.
"""
from typing import Any, Callable, Optional

from blinker import Namespace, Signal

challenge_signals = Namespace()

# Payload: recipient_ids
challenge_sent = challenge_signals.signal("challenge_sent")

# Payload: user_id, is_correct, score
challenge_completed = challenge_signals.signal("challenge_completed")

# Payload: user_id
challenge_rejected = challenge_signals.signal("challenge_rejected")

friend_signals = Namespace()

# Payload: from_user_id, to_user_id
friend_request_sent = friend_signals.signal("friend_request_sent")

# Payload: user_ids
friendship_changed = friend_signals.signal("friendship_changed")


class Subscription:
    """Handle for a receiver connected to a signal.

    The receiver stays connected until ``close()`` is called or the ``with``
    block exits. Closing twice is harmless.
    """

    def __init__(self, signal: Signal, receiver: Callable[..., Any]):
        self._signal = signal
        self._receiver: Optional[Callable[..., Any]] = receiver
        # Strong reference: stays connected until close()
        signal.connect(receiver, weak=False)

    @property
    def active(self) -> bool:
        return self._receiver is not None

    def close(self) -> None:
        if self._receiver is None:
            return
        self._signal.disconnect(self._receiver)
        self._receiver = None

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def subscribe(signal: Signal, receiver: Callable[..., Any]) -> Subscription:
    return Subscription(signal, receiver)
