import csv
import json
import logging
from collections import Counter
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

from .recommendations import recommend
from .rules import PROFILE_DISPLAY_NAMES, BehaviorRules
from .schemas import (
    AnalysisResult, ClassificationInput, ClassificationResult, ConversationAnalysis,
    ConversationSession, Profile, RecommendationContext, SessionInsights, SpeakerRole
)

logger = logging.getLogger(__name__)


class ProfileScorer:
    """Deterministic classification pipeline: axes, profile, confidence, then indicators"""

    def __init__(self, rules: Optional[BehaviorRules] = None):
        self.rules = rules or BehaviorRules()

    def analyze(self, data: ClassificationInput) -> AnalysisResult:
        features = data.audio_features
        axes = self.rules.score_axes(data.transcript, features)
        profile = self.rules.classify(axes)
        confidence = self.rules.confidence(data.transcript, features, axes)
        explanation = self.rules.explain(data.transcript, features, profile, axes)

        logger.info(
            "Classified %s (%d%% confidence, a=%+d e=%+d)",
            profile.value, confidence, axes.assertiveness, axes.emotionality
        )
        return AnalysisResult(
            classification=ClassificationResult(axes=axes, profile=profile, confidence=confidence),
            indicators=explanation.indicators,
            reasoning=explanation.reasoning,
        )

    def analyze_with_recommendation(self, data: ClassificationInput,
                                    context: Optional[RecommendationContext] = None) -> AnalysisResult:
        result = self.analyze(data)
        result.recommendation = recommend(result.classification.profile, context)
        return result

    def session_insights(self, session: ConversationSession) -> SessionInsights:
        """Classify the client side of a session, using every segment as history"""
        segments = session.segments
        duration_seconds = sum(s.duration for s in segments) / 1000

        if not segments:
            return SessionInsights(
                session_id=session.id,
                segment_count=0,
                duration_seconds=0,
            )

        client = [s for s in segments if s.speaker_role == SpeakerRole.CLIENT]
        target = client or segments
        data = ClassificationInput(
            transcript=" ".join(s.transcript for s in target),
            conversation_history=[s.transcript for s in segments],
            speaker_role=SpeakerRole.CLIENT if client else SpeakerRole.UNKNOWN,
        )
        result = self.analyze_with_recommendation(data)

        return SessionInsights(
            session_id=session.id,
            segment_count=len(segments),
            duration_seconds=duration_seconds,
            profile_detected=result.classification.profile,
            confidence=result.classification.confidence,
            key_insights=result.indicators[:3],
            recommended_next_steps=list(result.recommendation.next_steps),
        )


class OutputGenerator:
    def generate_json_output(self, results: List[ConversationAnalysis], output_path: Path):
        output_data = [result.model_dump(mode='json') for result in results]

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(output_data, f, indent=2, ensure_ascii=False, default=self._json_serializer)

    def generate_csv_output(self, results: List[ConversationAnalysis], output_path: Path):
        if not results:
            return

        with open(output_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)

            writer.writerow([
                'conversation_id', 'title', 'utterance_count', 'profile', 'confidence',
                'assertiveness', 'emotionality', 'indicators', 'immediate_action', 'analyzed_at'
            ])

            for result in results:
                classification = result.analysis.classification
                recommendation = result.analysis.recommendation
                writer.writerow([
                    result.conversation_id,
                    result.title or '',
                    result.utterance_count,
                    classification.profile.value,
                    classification.confidence,
                    classification.axes.assertiveness,
                    classification.axes.emotionality,
                    '; '.join(result.analysis.indicators),
                    recommendation.immediate_action if recommendation else '',
                    result.analyzed_at.isoformat(),
                ])

    def generate_report(self, results: List[ConversationAnalysis], output_path: Path):
        if not results:
            return

        counts = Counter(r.analysis.classification.profile for r in results)
        avg_confidence = sum(r.analysis.classification.confidence for r in results) / len(results)

        markdown_content = f"""# Sales Copilot - Behavioral Profile Report

## Summary Statistics
- **Total Conversations Analyzed**: {len(results)}
- **Average Confidence**: {avg_confidence:.1f}%

## Profile Distribution

| Profile | Conversations | Share |
|---------|---------------|-------|
"""
        for profile in Profile:
            share = counts[profile] / len(results) * 100
            markdown_content += f"| {PROFILE_DISPLAY_NAMES[profile]} | {counts[profile]} | {share:.1f}% |\n"

        markdown_content += """
## Conversations

| Conversation | Title | Profile | Confidence | Assertiveness | Emotionality |
|--------------|-------|---------|------------|---------------|--------------|
"""
        ranked = sorted(results, key=lambda r: r.analysis.classification.confidence, reverse=True)
        for result in ranked:
            c = result.analysis.classification
            markdown_content += (
                f"| {result.conversation_id} | {result.title or 'N/A'} | {c.profile.value} | "
                f"**{c.confidence}%** | {c.axes.assertiveness:+d} | {c.axes.emotionality:+d} |\n"
            )

        markdown_content += "\n## Detail\n\n"
        for result in ranked:
            analysis = result.analysis
            markdown_content += f"""### {result.conversation_id} - {result.title or 'Untitled'}

**Reasoning**: {analysis.reasoning}

**Indicators**:
"""
            for indicator in analysis.indicators:
                markdown_content += f"- {indicator}\n"

            if analysis.recommendation:
                markdown_content += f"\n**Next action**: {analysis.recommendation.immediate_action}\n"

            markdown_content += "\n---\n\n"

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(markdown_content)

    def _json_serializer(self, obj):
        if isinstance(obj, (date, datetime)):
            return obj.isoformat()
        raise TypeError(f"Object of type {type(obj)} is not JSON serializable")
