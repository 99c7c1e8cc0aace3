import logging
from typing import List, Optional

from .extended_profile import ExtendedProfileClassifier
from .personality import PersonalityClassifier
from .schemas import (
    BehavioralAnalysis, CombinedInsights, ExtendedProfile, PersonalityTypeProfile, Profile
)

logger = logging.getLogger(__name__)


PROFILE_STRATEGIES = {
    Profile.PRAGMATIC: "Foque em resultados concretos, seja direto e objetivo. Evite detalhes desnecessários.",
    Profile.INTUITIVE: "Use entusiasmo, conecte-se emocionalmente e mostre o impacto social da solução.",
    Profile.ANALYTICAL: "Apresente dados detalhados, estatísticas e evidências. Permita tempo para análise.",
    Profile.INTEGRATOR: "Construa relacionamento, seja paciente e mostre como a solução beneficia a equipe.",
}
DEFAULT_STRATEGY = "Abordagem personalizada baseada no perfil identificado."

# Keyed by the first letter of the four-letter type code
LETTER_APPROACHES = {
    "E": "Pessoa extrovertida - engaje em discussão ativa",
    "I": "Pessoa introvertida - dê tempo para reflexão",
    "S": "Focado em sensação - use exemplos práticos e concretos",
    "N": "Focado em intuição - explore possibilidades futuras",
    "T": "Pensador - use lógica e análise objetiva",
    "F": "Sentimental - enfatize valores e impacto nas pessoas",
    "J": "Julgador - seja estruturado e pontual",
    "P": "Perceptivo - mantenha flexibilidade e opções",
}
DEFAULT_APPROACH = "Abordagem equilibrada"


def _first(items: List[str], default: str) -> str:
    return items[0] if items else default


def combine(extended: ExtendedProfile, personality: PersonalityTypeProfile) -> CombinedInsights:
    """Template the two profiles into one set of coaching sentences. No scoring happens here."""
    label = extended.profile.value
    motivation = _first(extended.traits.motivation_factors, "resultados")
    strength = _first(personality.strengths, "Comunicação")
    approach = LETTER_APPROACHES.get(personality.type_code[:1], DEFAULT_APPROACH)

    return CombinedInsights(
        immediate_action=(
            f"Baseado no perfil {label}, {extended.subtype}: "
            f"ajuste sua abordagem para ser mais {extended.subtype.lower()}."
        ),
        script=(
            f'"Entendo que você valoriza {motivation}. '
            f'Deixe-me mostrar como nossa solução atende exatamente isso..."'
        ),
        disc_based_strategy=PROFILE_STRATEGIES.get(extended.profile, DEFAULT_STRATEGY),
        mbti_based_approach=f"{approach} - Tipo {personality.type_code}",
        combined_insights=(
            f"Cliente {label}/{personality.type_code}: {extended.traits.communication_style}. "
            f"{strength} é um ponto forte para abordar."
        ),
    )


class BehavioralAnalyzer:
    """Runs the extended and personality classifiers on the same transcript and merges them"""

    def __init__(self, extended_classifier: Optional[ExtendedProfileClassifier] = None,
                 personality_classifier: Optional[PersonalityClassifier] = None):
        self.extended_classifier = extended_classifier or ExtendedProfileClassifier()
        self.personality_classifier = personality_classifier or PersonalityClassifier()

    def analyze_complete(self, transcript: str,
                         conversation_history: Optional[List[str]] = None) -> BehavioralAnalysis:
        extended = self.extended_classifier.classify_extended(transcript, conversation_history)
        personality = self.personality_classifier.classify_personality(transcript, conversation_history)

        logger.info(
            "Behavioral analysis: %s/%s + %s",
            extended.profile.value, extended.subtype, personality.type_code
        )
        return BehavioralAnalysis(
            transcript=transcript,
            extended=extended,
            personality=personality,
            recommendations=combine(extended, personality),
        )
