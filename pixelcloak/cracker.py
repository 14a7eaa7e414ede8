"""
MD5 password search

Dictionary, brute-force and external-candidate attacks share one batch
loop: hash a batch of candidates synchronously, report progress, yield to
the event loop, check for cancellation, repeat. Cancellation is only
observed between batches.
"""

import asyncio
import itertools
import logging
import re
import threading
from enum import Enum
from typing import Awaitable, Callable, Iterable, Iterator, List, Optional, Sequence, Union

from .errors import AttackNotFeasible, AttackTooLarge, Cancelled, FormatError, InputMissing
from .hashes import md5

logger = logging.getLogger(__name__)

BATCH_SIZE = 5000
BRUTE_FORCE_MAX_COMBINATIONS = 50_000_000
SUGGESTION_TIMEOUT = 60.0  # seconds

LOWERCASE = 'abcdefghijklmnopqrstuvwxyz'
UPPERCASE = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ'
DIGITS = '0123456789'
SYMBOLS = '!@#$%^&*()_+-=[]{}|;:,.<>?'

MD5_HEX_RE = re.compile(r'^[a-f0-9]{32}$')

ProgressCallback = Callable[[int, int], None]


class JobState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    FOUND = "found"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"
    ERRORED = "errored"


TERMINAL_STATES = {JobState.FOUND, JobState.EXHAUSTED, JobState.CANCELLED, JobState.ERRORED}


def normalize_target(target_hash: str) -> str:
    """Lower-case an MD5 hex digest and validate its shape."""
    if not target_hash or not target_hash.strip():
        raise InputMissing("target hash")
    target = target_hash.strip().lower()
    if not MD5_HEX_RE.match(target):
        raise FormatError("Invalid MD5 hash. Expected 32 hexadecimal characters.")
    return target


class SearchJob:
    """
    One attack against one target hash.

    A job runs once. Progress is (checked, total); `password` holds the
    match when the job ends in FOUND.
    """

    def __init__(self, target_hash: str, candidates: Iterable[str], total: int):
        self.target_hash = normalize_target(target_hash)
        self.total = total
        self.checked = 0
        self.state = JobState.IDLE
        self.password = None
        self._candidates = iter(candidates)
        self._cancel_event = threading.Event()

    def cancel(self):
        """Request cancellation; honoured at the next batch boundary."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    async def run(self, batch_size: int = BATCH_SIZE, on_progress: ProgressCallback = None,
                  cancel_token: threading.Event = None) -> Optional[str]:
        """
        Search until a match, exhaustion or cancellation.

        Args:
            batch_size: candidates hashed between yields
            on_progress: called with (checked, total) after every batch and on a match
            cancel_token: optional external event; setting it cancels the job

        Returns:
            The matching password, or None when every candidate was checked

        Raises:
            Cancelled: if cancellation was requested; the exception carries this job
            asyncio.CancelledError: if the running task was cancelled
        """
        if self.state is not JobState.IDLE:
            raise RuntimeError("A search job can only be run once")
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self.state = JobState.RUNNING
        logger.debug("Search started: %d candidates", self.total)
        try:
            while True:
                if self.cancelled or (cancel_token is not None and cancel_token.is_set()):
                    self.state = JobState.CANCELLED
                    logger.info("Search cancelled after %d candidates", self.checked)
                    raise Cancelled("Aborted by user.", job=self)

                batch = list(itertools.islice(self._candidates, batch_size))
                for word in batch:
                    self.checked += 1
                    if md5(word) == self.target_hash:
                        self.state = JobState.FOUND
                        self.password = word
                        self._report(on_progress)
                        logger.info("Match found after %d candidates", self.checked)
                        return word

                if len(batch) < batch_size:
                    self.state = JobState.EXHAUSTED
                    self._report(on_progress)
                    return None

                self._report(on_progress)
                logger.debug("Checked %d/%d candidates", self.checked, self.total)
                await asyncio.sleep(0)
        except Cancelled:
            raise
        except asyncio.CancelledError:
            self.state = JobState.CANCELLED
            logger.info("Search task cancelled after %d candidates", self.checked)
            raise
        except Exception:
            self.state = JobState.ERRORED
            raise

    def _report(self, on_progress: Optional[ProgressCallback]):
        if on_progress is not None:
            on_progress(self.checked, self.total)


def parse_wordlist(wordlist: Union[str, Sequence[str]]) -> List[str]:
    """
    Split a wordlist into candidates.

    Text is split on line breaks; empty lines are dropped and each word has
    surrounding whitespace trimmed.
    """
    lines = wordlist.splitlines() if isinstance(wordlist, str) else list(wordlist)
    return [line.strip() for line in lines if line]


async def crack_dictionary(target_hash: str, wordlist: Union[str, Sequence[str]],
                           batch_size: int = BATCH_SIZE, on_progress: ProgressCallback = None,
                           cancel_token: threading.Event = None) -> SearchJob:
    """
    Check every word of a wordlist against an MD5 digest, in order.

    Returns:
        The finished job (FOUND or EXHAUSTED)

    Raises:
        Cancelled: if cancel_token was set before the search finished
    """
    words = parse_wordlist(wordlist)
    if not words:
        raise InputMissing("wordlist")
    job = SearchJob(target_hash, words, len(words))
    await job.run(batch_size, on_progress, cancel_token)
    return job


async def crack_candidates(target_hash: str, candidates: Sequence[str],
                           batch_size: int = BATCH_SIZE, on_progress: ProgressCallback = None,
                           cancel_token: threading.Event = None) -> SearchJob:
    """Dictionary search over externally generated candidates."""
    return await crack_dictionary(target_hash, list(candidates), batch_size, on_progress, cancel_token)


def total_combinations(charset: str, max_length: int) -> int:
    """Sum of len(charset) ** i for i in 1..max_length."""
    if not charset or max_length <= 0:
        return 0
    return sum(len(charset) ** i for i in range(1, max_length + 1))


def max_feasible_length(charset: str, ceiling: int = BRUTE_FORCE_MAX_COMBINATIONS) -> int:
    """Longest max_length whose combination count stays within the ceiling."""
    if not charset:
        return 0
    if len(charset) == 1:
        return ceiling
    length = 0
    while total_combinations(charset, length + 1) <= ceiling:
        length += 1
    return length


def build_charset(lower: bool = False, upper: bool = False, digits: bool = False,
                  symbols: bool = False, custom: str = '') -> str:
    charset = ''
    if lower:
        charset += LOWERCASE
    if upper:
        charset += UPPERCASE
    if digits:
        charset += DIGITS
    if symbols:
        charset += SYMBOLS
    # custom characters are de-duplicated among themselves only
    charset += ''.join(dict.fromkeys(custom))
    return charset


def generate_candidates(charset: str, max_length: int) -> Iterator[str]:
    """
    All strings over charset of length 1..max_length.

    Shorter strings come first; within a length the order follows charset.
    """
    for length in range(1, max_length + 1):
        for combo in itertools.product(charset, repeat=length):
            yield ''.join(combo)


async def crack_brute_force(target_hash: str, charset: str, max_length: int,
                            batch_size: int = BATCH_SIZE, on_progress: ProgressCallback = None,
                            cancel_token: threading.Event = None,
                            max_combinations: int = BRUTE_FORCE_MAX_COMBINATIONS) -> SearchJob:
    """
    Enumerate every candidate up to max_length and compare MD5 digests.

    Raises:
        AttackTooLarge: if the combination count exceeds max_combinations
        Cancelled: if cancel_token was set before the search finished
    """
    if not charset:
        raise InputMissing("character set")
    if max_length <= 0:
        raise FormatError("Maximum length must be at least 1.")

    total = total_combinations(charset, max_length)
    if total > max_combinations:
        raise AttackTooLarge(
            f"Attack complexity is too high ({total:,} combinations). "
            "Please reduce length or character set."
        )

    job = SearchJob(target_hash, generate_candidates(charset, max_length), total)
    await job.run(batch_size, on_progress, cancel_token)
    return job


def crack_rainbow(target_hash: str):
    """Rainbow-table lookups need precomputed tables this tool does not ship."""
    normalize_target(target_hash)
    raise AttackNotFeasible(
        "Rainbow table attack is not feasible: precomputed tables are gigabytes "
        "to terabytes in size."
    )


async def crack_with_suggestions(target_hash: str,
                                 suggest: Callable[[str], Awaitable[Sequence[str]]],
                                 timeout: float = SUGGESTION_TIMEOUT,
                                 batch_size: int = BATCH_SIZE,
                                 on_progress: ProgressCallback = None,
                                 cancel_token: threading.Event = None) -> SearchJob:
    """
    Ask an external model for likely passwords, then test them.

    Args:
        target_hash: MD5 digest to crack
        suggest: coroutine function returning candidate passwords for a hash
        timeout: seconds to wait for the suggestions

    Raises:
        Cancelled: if the suggestions did not arrive in time, or the search was cancelled
        FormatError: if the collaborator did not return a list of strings
    """
    target = normalize_target(target_hash)
    try:
        candidates = await asyncio.wait_for(suggest(target), timeout)
    except asyncio.TimeoutError:
        raise Cancelled(f"No password suggestions within {timeout} seconds.") from None

    if not isinstance(candidates, (list, tuple)) or not all(isinstance(c, str) for c in candidates):
        raise FormatError("Suggestion service did not return a list of strings.")
    return await crack_candidates(target, candidates, batch_size, on_progress, cancel_token)
