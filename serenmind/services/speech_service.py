import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)

PREFERRED_VOICE_NAMES = ("Samantha", "Victoria", "Ava", "Moira", "Karen")
RETRYABLE_ERRORS = {"canceled", "interrupted"}
MAX_ATTEMPTS = 3


class Voice(BaseModel):
    name: str
    lang: str


class SpeechResult(BaseModel):
    spoken: bool
    attempts: int
    error: Optional[str] = None


class SpeechSynthesisError(Exception):
    """Raised by engines; ``error`` is the engine's error code
    (``canceled``, ``interrupted``, ``not-allowed``, ...)."""

    def __init__(self, error: str, message: str = ""):
        self.error = error
        super().__init__(message or error)


class SpeechEngine(ABC):
    """Abstract base class for text-to-speech backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def voices(self) -> List[Voice]:
        ...

    @abstractmethod
    async def speak(self, text: str, voice: Optional[Voice], pitch: float, rate: float, volume: float) -> None:
        """Speak ``text``; raise ``SpeechSynthesisError`` on failure."""
        ...

    def cancel(self) -> None:
        """Stop any ongoing speech."""


def select_voice(voices: List[Voice]) -> Optional[Voice]:
    if not voices:
        return None
    english = [v for v in voices if v.lang.lower().startswith("en")]
    for voice in english:
        if "female" in voice.name.lower() or any(n in voice.name for n in PREFERRED_VOICE_NAMES):
            return voice
    if english:
        return english[0]
    return voices[0]


class VoiceAssistant:

    def __init__(
        self,
        engine: SpeechEngine,
        pitch: float = 1.1,
        rate: float = 0.9,
        volume: float = 1.0,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay: float = 0.25,
    ):
        self.engine = engine
        self.pitch = pitch
        self.rate = rate
        self.volume = volume
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._voice: Optional[Voice] = None

    @property
    def voice(self) -> Optional[Voice]:
        if self._voice is None:
            self._voice = select_voice(self.engine.voices())
        return self._voice

    @voice.setter
    def voice(self, voice: Optional[Voice]) -> None:
        self._voice = voice

    async def speak(self, text: str) -> SpeechResult:
        """Speak ``text``, retrying only on canceled/interrupted errors."""
        self.engine.cancel()
        attempts = 0
        while True:
            attempts += 1
            try:
                await self.engine.speak(text, self.voice, self.pitch, self.rate, self.volume)
                return SpeechResult(spoken=True, attempts=attempts)
            except SpeechSynthesisError as e:
                if e.error in RETRYABLE_ERRORS and attempts < self.max_attempts:
                    logger.debug("Speech %s on attempt %d, retrying", e.error, attempts)
                    await asyncio.sleep(self.retry_delay)
                    continue
                logger.warning("Speech synthesis failed after %d attempt(s): %s", attempts, e.error)
                return SpeechResult(spoken=False, attempts=attempts, error=e.error)

    def stop(self) -> None:
        self.engine.cancel()


_assistant: Optional[VoiceAssistant] = None


def set_speech_engine(engine: Optional[SpeechEngine], **options) -> None:
    global _assistant
    _assistant = VoiceAssistant(engine, **options) if engine is not None else None


def get_voice_assistant() -> Optional[VoiceAssistant]:
    return _assistant
