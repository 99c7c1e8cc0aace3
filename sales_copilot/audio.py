import hashlib
import logging
import random
import time
import uuid
from typing import Optional

from .schemas import AcousticFeatures, AudioSegment, EmotionalTone, SpeakerRole
from .sessions import SessionRepository

logger = logging.getLogger(__name__)


MOCK_TRANSCRIPTS = [
    "Olá, como posso ajudá-lo hoje?",
    "Estou interessado em saber mais sobre seus produtos.",
    "Qual é o preço do seu serviço?",
    "Preciso entender melhor os benefícios.",
    "Quando podemos agendar uma demonstração?",
    "Hmm, interessante. Mas eu preciso analisar os números.",
    "Parece uma boa solução para nossa empresa.",
    "Qual é o prazo de implementação?",
    "Vocês oferecem suporte técnico?",
    "Gostaria de discutir isso com minha equipe.",
]

MOCK_SEGMENT_DURATION_MS = 3000

_TONES = [EmotionalTone.POSITIVE, EmotionalTone.NEUTRAL, EmotionalTone.NEGATIVE, EmotionalTone.MIXED]


def _rng_for(audio: bytes) -> random.Random:
    """Random source seeded from the audio content, so identical bytes give identical output"""
    digest = hashlib.sha256(audio).hexdigest()
    return random.Random(int(digest, 16))


def mock_transcribe(audio: bytes) -> str:
    return _rng_for(audio).choice(MOCK_TRANSCRIPTS)


def mock_features(audio: bytes) -> AcousticFeatures:
    rng = _rng_for(audio)
    # Skip the draw used by mock_transcribe so the two stay independent
    rng.random()
    return AcousticFeatures(
        pace=rng.randint(100, 199),
        volume=rng.randint(0, 99),
        pitch=rng.randint(100, 299),
        energy=rng.randint(0, 99),
        pause_frequency=round(rng.uniform(0, 10), 2),
        emotional_tone=rng.choice(_TONES),
    )


def mock_speaker_role(audio: bytes) -> SpeakerRole:
    digest = hashlib.sha256(audio).digest()
    return SpeakerRole.SELLER if digest[-1] % 2 == 0 else SpeakerRole.CLIENT


class AudioService:
    """
    Turns uploaded audio chunks into session segments.

    Transcription and acoustic measurement are simulated; the same bytes
    always produce the same transcript, features and speaker role.
    """

    def __init__(self, repository: SessionRepository):
        self.repository = repository

    def process_segment(self, session_id: str, audio: bytes, timestamp: Optional[int] = None) -> AudioSegment:
        if not audio:
            raise ValueError("Audio data is required")

        logger.info("Processing audio segment: %d bytes", len(audio))
        segment = AudioSegment(
            id=str(uuid.uuid4()),
            session_id=session_id,
            timestamp=timestamp if timestamp is not None else int(time.time() * 1000),
            duration=MOCK_SEGMENT_DURATION_MS,
            speaker_role=mock_speaker_role(audio),
            transcript=mock_transcribe(audio),
            audio_features=mock_features(audio),
        )
        self.repository.append_segment(segment)

        logger.info("Audio segment processed with transcript: %r", segment.transcript)
        return segment
