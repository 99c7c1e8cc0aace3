"""
Rule-based behavioral scoring.

Transcripts are scored on two axes, assertiveness and emotionality, from
keyword counts, sentence shape and optional acoustic features. The axes are
then mapped to one of four profiles with a quadrant rule that has a small
dead zone around the origin.
"""

import re
from typing import List, Optional, Tuple

from .schemas import (
    AcousticFeatures, AxisScores, EmotionalTone, Explanation, Profile
)


AXIS_LIMIT = 100
DEAD_ZONE = 10

# Assertiveness vocabulary (weight applied per occurrence)
ASSERTIVE_WORDS = [
    "decidir", "quero", "vou", "preciso", "agora", "rápido", "resultado",
    "quanto", "urgente", "imediato", "prazo", "fechar", "certeza",
    "completamente", "definitivamente",
]
HESITATION_WORDS = [
    "como", "quando", "por que", "poderia", "talvez", "acho que", "não sei",
    "será que", "dúvida", "hmm",
]
ASSERTIVE_WEIGHT = 20
HESITATION_WEIGHT = 15
SENTENCE_BALANCE_WEIGHT = 10

# Emotionality vocabulary
EMOTIONAL_WORDS = [
    "sentir", "sinto", "incrível", "preocupado", "animado", "empolgado",
    "equipe", "pessoas", "imaginar", "transformar", "adoro", "fantástico",
    "feliz", "juntos", "relacionamento",
]
RATIONAL_WORDS = [
    "dados", "números", "análise", "lógico", "evidência", "prova", "roi",
    "custo", "custa", "concreto", "métrica", "percentual", "detalhe",
    "planilha",
]
EMOTIONAL_WEIGHT = 20
RATIONAL_WEIGHT = 15
EXCLAMATION_WEIGHT = 5

TONE_BONUS = {
    EmotionalTone.POSITIVE: 25,
    EmotionalTone.NEGATIVE: 15,
    EmotionalTone.MIXED: 10,
    EmotionalTone.NEUTRAL: -5,
}

# Acoustic thresholds
FAST_PACE = 150
SLOW_PACE = 120
LOUD_VOLUME = 70
SOFT_VOLUME = 40
FEW_PAUSES = 3
MANY_PAUSES = 5
HIGH_ENERGY = 70
LOW_ENERGY = 40
HIGH_PITCH = 200

# Confidence
CONFIDENCE_BASE = 50
CONFIDENCE_MIN = 30
CONFIDENCE_MAX = 95
STRONG_AXIS = 30
VERY_STRONG_AXIS = 60

PROFILE_DISPLAY_NAMES = {
    Profile.PRAGMATIC: "Pragmático",
    Profile.INTUITIVE: "Intuitivo",
    Profile.ANALYTICAL: "Analítico",
    Profile.INTEGRATOR: "Integrador",
}

PROFILE_ADJECTIVES = {
    Profile.PRAGMATIC: ("direto", "orientado a resultados"),
    Profile.INTUITIVE: ("entusiasmado", "visionário"),
    Profile.ANALYTICAL: ("cauteloso", "orientado a dados"),
    Profile.INTEGRATOR: ("colaborativo", "orientado a pessoas"),
}

# Keyword -> indicator text, checked only for the resolved profile
PROFILE_INDICATORS = {
    Profile.PRAGMATIC: [
        ("resultado", "Foco em resultados"),
        ("roi", "Menciona retorno sobre investimento"),
        ("quanto", "Pergunta objetiva sobre valores"),
        ("prazo", "Preocupação com prazos"),
        ("rápido", "Busca agilidade na decisão"),
        ("agora", "Senso de urgência"),
        ("preciso", "Expressa necessidades de forma direta"),
        ("decidir", "Linguagem de decisão"),
    ],
    Profile.INTUITIVE: [
        ("incrível", "Linguagem entusiasmada"),
        ("imaginar", "Pensa em possibilidades futuras"),
        ("transformar", "Visão de transformação"),
        ("inovação", "Interesse por inovação"),
        ("animado", "Demonstra empolgação"),
        ("empolgado", "Demonstra empolgação"),
        ("fantástico", "Reações expressivas"),
    ],
    Profile.ANALYTICAL: [
        ("dados", "Solicita dados"),
        ("números", "Quer ver números"),
        ("análise", "Menciona necessidade de análise"),
        ("evidência", "Busca evidências"),
        ("prova", "Pede comprovação"),
        ("detalhe", "Atenção a detalhes"),
        ("como funciona", "Quer entender o funcionamento"),
        ("estudo", "Interesse em estudos de caso"),
    ],
    Profile.INTEGRATOR: [
        ("equipe", "Preocupação com a equipe"),
        ("pessoas", "Foco nas pessoas"),
        ("juntos", "Valoriza colaboração"),
        ("consenso", "Busca consenso"),
        ("confiança", "Valoriza confiança"),
        ("relacionamento", "Valoriza relacionamentos"),
        ("suporte", "Preocupação com suporte"),
    ],
}

FALLBACK_INDICATOR = "Padrões gerais de comunicação"

_SENTENCE_PATTERN = re.compile(r'([^.!?]*)([.!?]|$)')


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def count_occurrences(text: str, words: List[str]) -> int:
    """Total case-insensitive substring occurrences of every word in text"""
    lowered = text.lower()
    return sum(lowered.count(word) for word in words)


def split_sentences(text: str) -> List[Tuple[str, str]]:
    """Split text on .!? into (sentence, terminator) pairs, skipping empty sentences"""
    sentences = []
    for body, terminator in _SENTENCE_PATTERN.findall(text):
        if body.strip():
            sentences.append((body.strip(), terminator))
    return sentences


class BehaviorRules:
    def __init__(self, dead_zone: int = DEAD_ZONE):
        self.dead_zone = dead_zone

    # -------------------------------------------------------------------------
    # Axis scoring
    # -------------------------------------------------------------------------

    def score_axes(self, transcript: str, features: Optional[AcousticFeatures] = None) -> AxisScores:
        return AxisScores(
            assertiveness=self.score_assertiveness(transcript, features),
            emotionality=self.score_emotionality(transcript, features),
        )

    def score_assertiveness(self, transcript: str, features: Optional[AcousticFeatures] = None) -> int:
        score = 0
        score += ASSERTIVE_WEIGHT * count_occurrences(transcript, ASSERTIVE_WORDS)
        score -= HESITATION_WEIGHT * count_occurrences(transcript, HESITATION_WORDS)

        if features:
            if features.pace > FAST_PACE:
                score += 10
            if features.volume > LOUD_VOLUME:
                score += 10
            if features.pause_frequency < FEW_PAUSES:
                score += 15
            if features.energy > HIGH_ENERGY:
                score += 10

        score += self._sentence_balance_bonus(transcript)
        return int(clamp(score, -AXIS_LIMIT, AXIS_LIMIT))

    def score_emotionality(self, transcript: str, features: Optional[AcousticFeatures] = None) -> int:
        score = 0
        score += EMOTIONAL_WEIGHT * count_occurrences(transcript, EMOTIONAL_WORDS)
        score -= RATIONAL_WEIGHT * count_occurrences(transcript, RATIONAL_WORDS)

        if features:
            score += TONE_BONUS.get(features.emotional_tone, 0)
            if features.energy > HIGH_ENERGY:
                score += 10
            if features.pitch > HIGH_PITCH:
                score += 10

        score += EXCLAMATION_WEIGHT * transcript.count("!")
        return int(clamp(score, -AXIS_LIMIT, AXIS_LIMIT))

    def _sentence_balance_bonus(self, transcript: str) -> int:
        """Bonus proportional to the share of declarative sentences"""
        sentences = split_sentences(transcript)
        if not sentences:
            return 0
        declarative = sum(1 for _, terminator in sentences if terminator != "?")
        return round(SENTENCE_BALANCE_WEIGHT * declarative / len(sentences))

    # -------------------------------------------------------------------------
    # Profile mapping
    # -------------------------------------------------------------------------

    def classify(self, axes: AxisScores) -> Profile:
        """
        Resolve a profile from the two axes.

        Rules are evaluated in a fixed order: quadrant (both axes outside the
        dead zone), near-origin (both inside), then dominant axis.
        """
        a, e = axes.assertiveness, axes.emotionality
        t = self.dead_zone

        if a > t and e < -t:
            return Profile.PRAGMATIC
        if a > t and e > t:
            return Profile.INTUITIVE
        if a < -t and e < -t:
            return Profile.ANALYTICAL
        if a < -t and e > t:
            return Profile.INTEGRATOR

        if abs(a) <= t and abs(e) <= t:
            return self._by_sign(a, e)

        if abs(a) >= abs(e):
            return self._by_sign(a, e)
        if e > 0:
            return Profile.INTUITIVE if a >= 0 else Profile.INTEGRATOR
        # Negative emotionality dominating resolves to PRAGMATIC regardless of
        # assertiveness sign; kept as-is to match historical classifications.
        return Profile.PRAGMATIC

    @staticmethod
    def _by_sign(a: int, e: int) -> Profile:
        if a >= 0:
            return Profile.INTUITIVE if e >= 0 else Profile.PRAGMATIC
        return Profile.INTEGRATOR if e >= 0 else Profile.ANALYTICAL

    # -------------------------------------------------------------------------
    # Confidence
    # -------------------------------------------------------------------------

    def confidence(self, transcript: str, features: Optional[AcousticFeatures], axes: AxisScores) -> int:
        confidence = CONFIDENCE_BASE

        length = len(transcript)
        if length > 50:
            confidence += 5
        if length > 100:
            confidence += 10
        if length > 200:
            confidence += 10

        if features:
            confidence += 15

        for value in (axes.assertiveness, axes.emotionality):
            if abs(value) > STRONG_AXIS:
                confidence += 5
            if abs(value) > VERY_STRONG_AXIS:
                confidence += 5

        words = len(transcript.split())
        if words >= 10:
            confidence += 5
        if words >= 30:
            confidence += 5
        if words < 3:
            confidence -= 20

        return int(clamp(confidence, CONFIDENCE_MIN, CONFIDENCE_MAX))

    # -------------------------------------------------------------------------
    # Indicators and reasoning
    # -------------------------------------------------------------------------

    def explain(self, transcript: str, features: Optional[AcousticFeatures],
                profile: Profile, axes: AxisScores) -> Explanation:
        lowered = transcript.lower()
        indicators: List[str] = []

        for keyword, text in PROFILE_INDICATORS.get(profile, []):
            if keyword in lowered and text not in indicators:
                indicators.append(text)

        if features:
            indicators.extend(self._acoustic_indicators(features, profile))

        questions = transcript.count("?")
        if questions:
            indicators.append(f"{questions} pergunta(s) feita(s)")
        exclamations = transcript.count("!")
        if exclamations:
            indicators.append(f"{exclamations} exclamação(ões)")

        if not indicators:
            indicators = [FALLBACK_INDICATOR]

        first, second = PROFILE_ADJECTIVES[profile]
        reasoning = (
            f"Perfil {PROFILE_DISPLAY_NAMES[profile]} identificado: comportamento {first} e {second} "
            f"(assertividade {axes.assertiveness:+d}, emocionalidade {axes.emotionality:+d}). "
            f"Principais indicadores: {'; '.join(indicators[:3])}."
        )
        return Explanation(indicators=indicators, reasoning=reasoning)

    def _acoustic_indicators(self, features: AcousticFeatures, profile: Profile) -> List[str]:
        found = []
        if profile == Profile.PRAGMATIC:
            if features.pace > FAST_PACE:
                found.append(f"Fala acelerada ({features.pace:.0f} palavras/min)")
            if features.pause_frequency < FEW_PAUSES:
                found.append("Poucas pausas na fala")
            if features.volume > LOUD_VOLUME:
                found.append("Volume de voz elevado")
        elif profile == Profile.INTUITIVE:
            if features.energy > HIGH_ENERGY:
                found.append("Alta energia vocal")
            if features.emotional_tone == EmotionalTone.POSITIVE:
                found.append("Tom emocional positivo")
            if features.pitch > HIGH_PITCH:
                found.append(f"Entonação expressiva ({features.pitch:.0f} Hz)")
        elif profile == Profile.ANALYTICAL:
            if features.pace < SLOW_PACE:
                found.append("Ritmo de fala pausado")
            if features.pause_frequency > MANY_PAUSES:
                found.append("Pausas frequentes para reflexão")
            if features.emotional_tone == EmotionalTone.NEUTRAL:
                found.append("Tom emocional neutro")
        elif profile == Profile.INTEGRATOR:
            if features.volume < SOFT_VOLUME:
                found.append("Volume de voz moderado")
            if features.energy < LOW_ENERGY:
                found.append("Energia vocal contida")
            if features.pace < SLOW_PACE:
                found.append("Ritmo de fala calmo")
        return found
