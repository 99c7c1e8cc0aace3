from pydantic import BaseModel, Field
from typing import List, Optional, Dict
from datetime import datetime
from enum import Enum


class Profile(str, Enum):
    """Base behavioral profile resolved from the assertiveness/emotionality quadrants"""
    PRAGMATIC = "PRAGMATIC"
    INTUITIVE = "INTUITIVE"
    ANALYTICAL = "ANALYTICAL"
    INTEGRATOR = "INTEGRATOR"


# Portuguese spellings used by the coaching team and by older model prompts
PROFILE_ALIASES = {
    "pragmatic": Profile.PRAGMATIC,
    "pragmatico": Profile.PRAGMATIC,
    "pragmático": Profile.PRAGMATIC,
    "intuitive": Profile.INTUITIVE,
    "intuitivo": Profile.INTUITIVE,
    "analytical": Profile.ANALYTICAL,
    "analitico": Profile.ANALYTICAL,
    "analítico": Profile.ANALYTICAL,
    "integrator": Profile.INTEGRATOR,
    "integrador": Profile.INTEGRATOR,
}


def normalize_profile(value) -> Optional[Profile]:
    """Map an English or Portuguese profile label to a Profile, or None if unknown"""
    if isinstance(value, Profile):
        return value
    if not isinstance(value, str):
        return None
    return PROFILE_ALIASES.get(value.strip().lower())


class EmotionalTone(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    MIXED = "mixed"


class SpeakerRole(str, Enum):
    SELLER = "seller"
    CLIENT = "client"
    UNKNOWN = "unknown"


class SalesStage(str, Enum):
    DISCOVERY = "discovery"
    PRESENTATION = "presentation"
    OBJECTION = "objection"
    CLOSING = "closing"


class AcousticFeatures(BaseModel):
    """Coarse prosodic measurements attached to an utterance"""
    model_config = {"frozen": True}

    pace: float = Field(..., description="Speech rate in words per minute")
    volume: float = Field(..., ge=0, le=100, description="Loudness 0-100")
    pitch: float = Field(..., description="Mean pitch in Hz")
    energy: float = Field(..., ge=0, le=100, description="Vocal energy 0-100")
    pause_frequency: float = Field(..., ge=0, description="Pauses per interval")
    emotional_tone: EmotionalTone = Field(EmotionalTone.NEUTRAL, description="Dominant emotional tone")


class ClassificationInput(BaseModel):
    transcript: str = Field(..., description="Utterance text to classify")
    audio_features: Optional[AcousticFeatures] = Field(None, description="Optional acoustic features")
    conversation_history: List[str] = Field(default_factory=list, description="Prior utterances, oldest first")
    speaker_role: SpeakerRole = Field(SpeakerRole.UNKNOWN, description="Who produced the transcript")


class AxisScores(BaseModel):
    assertiveness: int = Field(..., ge=-100, le=100, description="Assertive (+) vs hesitant (-)")
    emotionality: int = Field(..., ge=-100, le=100, description="Emotional (+) vs rational (-)")


class ClassificationResult(BaseModel):
    axes: AxisScores
    profile: Profile
    confidence: int = Field(..., ge=0, le=100)


class Explanation(BaseModel):
    """Diagnostic evidence for a classification; never feeds recommendation selection"""
    indicators: List[str] = Field(default_factory=list)
    reasoning: str


class Timing(str, Enum):
    IMMEDIATE = "immediate"
    SHORT_TERM = "short_term"
    LONG_TERM = "long_term"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Recommendation(BaseModel):
    immediate_action: str
    approach: str
    suggested_script: str
    timing: Timing
    rationale: str
    priority: Priority
    objection_handling: Optional[str] = None
    next_steps: List[str] = Field(default_factory=list)


class RecommendationContext(BaseModel):
    """Caller context for recommendation selection. The stage is accepted but does not change the template."""
    transcript: Optional[str] = None
    conversation_context: List[str] = Field(default_factory=list)
    sales_stage: SalesStage = SalesStage.DISCOVERY
    client_name: Optional[str] = None
    product_context: Optional[str] = None


class AnalysisResult(BaseModel):
    classification: ClassificationResult
    indicators: List[str] = Field(default_factory=list)
    reasoning: str
    recommendation: Optional[Recommendation] = None


# =============================================================================
# EXTENDED PROFILES (subtype + personality dimensions)
# =============================================================================

class BehavioralAxes(BaseModel):
    attack_defense: int = Field(0, ge=-100, le=100, description="Results-driven attack (+) vs cautious defense (-)")
    reason_emotion: int = Field(0, ge=-100, le=100, description="Relationship/emotion (+) vs pure logic (-)")


class ProfileTraits(BaseModel):
    primary_traits: List[str] = Field(default_factory=list)
    communication_style: str
    motivation_factors: List[str] = Field(default_factory=list)


class ExtendedProfile(BaseModel):
    profile: Profile
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str
    subtype: str = Field(..., description="Subtype belonging to the profile's fixed subtype list")
    axes: BehavioralAxes
    traits: ProfileTraits
    source: str = Field(..., description="llm or fallback")


class PersonalityDimensions(BaseModel):
    extraversion: int = Field(0, ge=-100, le=100, description="E (+) vs I (-)")
    sensing: int = Field(0, ge=-100, le=100, description="S (+) vs N (-)")
    thinking: int = Field(0, ge=-100, le=100, description="T (+) vs F (-)")
    judging: int = Field(0, ge=-100, le=100, description="J (+) vs P (-)")


class PersonalityTypeProfile(BaseModel):
    type_code: str = Field(..., min_length=4, max_length=4)
    dimensions: PersonalityDimensions
    confidence: int = Field(..., ge=0, le=100)
    description: str
    strengths: List[str] = Field(default_factory=list)
    development_areas: List[str] = Field(default_factory=list)
    evidence: Dict[str, str] = Field(default_factory=dict, description="Per-dimension textual evidence, when provided")
    source: str = Field(..., description="llm or fallback")


class CombinedInsights(BaseModel):
    immediate_action: str
    script: str
    disc_based_strategy: str
    mbti_based_approach: str
    combined_insights: str


class BehavioralAnalysis(BaseModel):
    transcript: str
    extended: ExtendedProfile
    personality: PersonalityTypeProfile
    recommendations: CombinedInsights


class SentimentResult(BaseModel):
    sentiment: str = Field(..., description="positive, neutral or negative")
    confidence: int = Field(..., ge=0, le=100)
    emotions: List[str] = Field(default_factory=list)


# =============================================================================
# CONVERSATIONS AND SESSIONS
# =============================================================================

class Utterance(BaseModel):
    t: Optional[str] = Field(None, description="Timestamp in format HH:MM:SS or MM:SS")
    speaker: Optional[str] = Field(None, description="Speaker name as written in the source")
    role: SpeakerRole = Field(SpeakerRole.UNKNOWN, description="Resolved speaker role")
    text: str = Field(..., description="Content of the utterance")


class Conversation(BaseModel):
    conversation_id: str = Field(..., description="Unique conversation identifier")
    title: Optional[str] = Field(None, description="Title line, if any")
    participants: List[str] = Field(default_factory=list)
    utterances: List[Utterance] = Field(default_factory=list)
    source: str = Field(..., description="Importer that produced the conversation")

    def client_utterances(self) -> List[Utterance]:
        return [u for u in self.utterances if u.role == SpeakerRole.CLIENT]

    def to_classification_input(self) -> ClassificationInput:
        """Classify the client side of the conversation, using the whole exchange as history"""
        client = self.client_utterances()
        target = client or self.utterances
        return ClassificationInput(
            transcript=" ".join(u.text for u in target),
            conversation_history=[u.text for u in self.utterances],
            speaker_role=SpeakerRole.CLIENT if client else SpeakerRole.UNKNOWN,
        )


class ConversationAnalysis(BaseModel):
    conversation_id: str
    title: Optional[str] = None
    utterance_count: int
    analysis: AnalysisResult
    analyzed_at: datetime


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"


class AudioSegment(BaseModel):
    id: str
    session_id: str
    timestamp: int = Field(..., description="Capture time, epoch milliseconds")
    duration: int = Field(..., description="Segment length in milliseconds")
    speaker_role: SpeakerRole
    transcript: str
    audio_features: AcousticFeatures


class ConversationSession(BaseModel):
    id: str
    user_id: str
    client_name: Optional[str] = None
    client_company: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    status: SessionStatus = SessionStatus.ACTIVE
    segments: List[AudioSegment] = Field(default_factory=list)


class SessionInsights(BaseModel):
    session_id: str
    segment_count: int
    duration_seconds: float
    profile_detected: Optional[Profile] = None
    confidence: Optional[int] = None
    key_insights: List[str] = Field(default_factory=list)
    recommended_next_steps: List[str] = Field(default_factory=list)
