"""
FastAPI service for Sales Copilot - live behavioral profiling and coaching
"""

import base64
import binascii
import logging
import os
from datetime import datetime, timezone
from typing import Any, List, Optional

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field
import uvicorn

from sales_copilot.audio import AudioService
from sales_copilot.extended_profile import ExtendedProfileClassifier
from sales_copilot.insights import BehavioralAnalyzer
from sales_copilot.personality import PersonalityClassifier
from sales_copilot.recommendations import recommend
from sales_copilot.schemas import (
    AcousticFeatures, ClassificationInput, RecommendationContext, SalesStage
)
from sales_copilot.scoring import ProfileScorer
from sales_copilot.sentiment import analyze_sentiment
from sales_copilot.sessions import InMemorySessionRepository, SessionNotFoundError
from sales_copilot.settings import Settings, build_llm_client

settings = Settings.from_env()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Services are built once from settings; classifiers never read the environment themselves
llm_client = build_llm_client(settings)
repository = InMemorySessionRepository()
scorer = ProfileScorer()
audio_service = AudioService(repository)
analyzer = BehavioralAnalyzer(
    ExtendedProfileClassifier(client=llm_client, use_llm=llm_client is not None),
    PersonalityClassifier(client=llm_client, use_llm=llm_client is not None),
)

# Initialize FastAPI app
app = FastAPI(
    title="Sales Copilot API",
    description="Behavioral profiling and coaching recommendations for sales conversations",
    version="1.0.0"
)


# Request models
class DiscRequest(BaseModel):
    transcript: str = ""
    audio_features: Optional[AcousticFeatures] = None
    conversation_history: List[str] = Field(default_factory=list)


class SentimentRequest(BaseModel):
    text: str = ""


class RecommendationRequest(BaseModel):
    profile: Optional[str] = None
    transcript: str = ""
    conversation_context: List[str] = Field(default_factory=list)
    sales_stage: SalesStage = SalesStage.DISCOVERY
    client_name: Optional[str] = None
    product_context: Optional[str] = None


class BehavioralRequest(BaseModel):
    transcript: str = ""
    conversation_history: List[str] = Field(default_factory=list)


class StartSessionRequest(BaseModel):
    user_id: str = "demo-user"
    client_name: Optional[str] = None
    client_company: Optional[str] = None


class ProcessAudioRequest(BaseModel):
    session_id: str = ""
    audio_data: str = Field("", description="Base64-encoded audio chunk")
    timestamp: Optional[int] = None


def envelope(data: Any, message: Optional[str] = None) -> dict:
    """Standard response body: {success, data, message}"""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    return {"success": True, "data": data, "message": message}


def bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def session_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint"""
    return {
        "message": "Sales Copilot API",
        "status": "healthy",
        "version": "1.0.0"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "sales-copilot-api",
        "environment": settings.environment,
        "llm_enabled": llm_client is not None
    }


@app.post("/api/analysis/disc", tags=["Analysis"])
async def analyze_disc(request: DiscRequest):
    """Rule-based profile classification with indicators and reasoning"""
    if not request.transcript.strip():
        raise bad_request("Transcript is required for DISC analysis")

    result = scorer.analyze(ClassificationInput(
        transcript=request.transcript,
        audio_features=request.audio_features,
        conversation_history=request.conversation_history,
    ))
    return envelope(result, "DISC profile analyzed successfully")


@app.post("/api/analysis/sentiment", tags=["Analysis"])
async def sentiment(request: SentimentRequest):
    if not request.text.strip():
        raise bad_request("Text is required for sentiment analysis")

    return envelope(analyze_sentiment(request.text), "Sentiment analyzed successfully")


@app.post("/api/analysis/recommendations", tags=["Analysis"])
async def recommendations(request: RecommendationRequest):
    """Coaching template for a profile; unknown profile labels get the ANALYTICAL template"""
    if not request.profile or not request.transcript.strip():
        raise bad_request("Profile and transcript are required for recommendations")

    context = RecommendationContext(
        transcript=request.transcript,
        conversation_context=request.conversation_context,
        sales_stage=request.sales_stage,
        client_name=request.client_name,
        product_context=request.product_context,
    )
    return envelope(recommend(request.profile, context), "Recommendations generated successfully")


# Plain def: the model call blocks, so FastAPI runs this in its threadpool
@app.post("/api/analysis/behavioral", tags=["Analysis"])
def behavioral(request: BehavioralRequest):
    """Extended profile, personality type and combined insights"""
    if not request.transcript.strip():
        raise bad_request("Transcript is required for behavioral analysis")

    result = analyzer.analyze_complete(request.transcript, request.conversation_history)
    return envelope(result, "Behavioral analysis completed successfully")


@app.get("/api/analysis/session/{session_id}/insights", tags=["Analysis"])
async def session_insights(session_id: str):
    session = repository.get(session_id)
    if session is None:
        raise session_not_found()

    return envelope(scorer.session_insights(session), "Session insights generated successfully")


@app.post("/api/audio/session/start", tags=["Audio"], status_code=status.HTTP_201_CREATED)
async def start_session(request: StartSessionRequest):
    session = repository.create(
        user_id=request.user_id,
        client_name=request.client_name,
        client_company=request.client_company,
    )
    return envelope(session, "Session started successfully")


@app.get("/api/audio/session/{session_id}", tags=["Audio"])
async def get_session(session_id: str):
    session = repository.get(session_id)
    if session is None:
        raise session_not_found()

    return envelope(session)


@app.post("/api/audio/session/{session_id}/end", tags=["Audio"])
async def end_session(session_id: str):
    try:
        session = repository.end(session_id)
    except SessionNotFoundError:
        raise session_not_found()

    return envelope(session, "Session ended successfully")


@app.post("/api/audio/process", tags=["Audio"])
async def process_audio(request: ProcessAudioRequest):
    if not request.session_id or not request.audio_data:
        raise bad_request("Session ID and audio data are required")

    try:
        audio = base64.b64decode(request.audio_data, validate=True)
    except (binascii.Error, ValueError):
        raise bad_request("Audio data must be base64 encoded")

    try:
        segment = audio_service.process_segment(request.session_id, audio, request.timestamp)
    except SessionNotFoundError:
        raise session_not_found()
    except ValueError as e:
        raise bad_request(str(e))

    return envelope(segment, "Audio processed successfully")


if __name__ == "__main__":
    # For local development
    port = int(os.environ.get("PORT", 8080))
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        log_level="info"
    )
