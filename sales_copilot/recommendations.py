import logging
from typing import Optional

from .schemas import (
    Priority, Profile, Recommendation, RecommendationContext, Timing, normalize_profile
)

logger = logging.getLogger(__name__)


# Keyed by profile only; sales stage does not select a different entry.
RECOMMENDATION_TEMPLATES = {
    Profile.PRAGMATIC: Recommendation(
        immediate_action="Seja direto e apresente resultados concretos",
        approach="Foque em ROI e eficiência. Use senso de urgência apropriado",
        suggested_script=(
            "Baseado no que você mencionou, nossos clientes veem ROI de 200% em 6 meses. "
            "Quando podemos agendar a implementação?"
        ),
        timing=Timing.IMMEDIATE,
        rationale="Perfil pragmático valoriza decisões rápidas e resultados tangíveis",
        priority=Priority.HIGH,
        objection_handling="Apresente números concretos e casos de sucesso similares",
        next_steps=[
            "Apresentar proposta com ROI detalhado",
            "Definir cronograma de implementação",
            "Agendar reunião para fechamento",
        ],
    ),
    Profile.INTUITIVE: Recommendation(
        immediate_action="Demonstre entusiasmo e visão de futuro",
        approach="Foque em inovação, possibilidades e reconhecimento",
        suggested_script=(
            "Imagino como essa solução pode transformar completamente sua operação "
            "e colocá-los à frente da concorrência!"
        ),
        timing=Timing.IMMEDIATE,
        rationale="Perfil intuitivo se conecta com visão de futuro e inovação",
        priority=Priority.HIGH,
        objection_handling="Enfatize a exclusividade e o pioneirismo da solução",
        next_steps=[
            "Apresentar casos de inovação similares",
            "Mostrar visão de futuro com a solução",
            "Criar senso de exclusividade",
        ],
    ),
    Profile.ANALYTICAL: Recommendation(
        immediate_action="Forneça dados detalhados e evidências",
        approach="Apresente informações técnicas e permita tempo para análise",
        suggested_script=(
            "Entendo sua necessidade de análise. Tenho aqui um case study detalhado com métricas "
            "de cliente similar. Posso compartilhar os dados completos?"
        ),
        timing=Timing.SHORT_TERM,
        rationale="Perfil analítico precisa de dados concretos e tempo para avaliar",
        priority=Priority.MEDIUM,
        objection_handling="Ofereça mais dados, estudos de caso e período de teste",
        next_steps=[
            "Enviar documentação técnica detalhada",
            "Agendar demo técnica",
            "Oferecer período de piloto",
        ],
    ),
    Profile.INTEGRATOR: Recommendation(
        immediate_action="Enfatize benefícios para equipe e relacionamentos",
        approach="Foque no impacto nas pessoas e construa consenso",
        suggested_script=(
            "Entendo sua preocupação com a equipe. Nossa solução facilita o trabalho de todos. "
            "Que tal um workshop para alinhar os envolvidos?"
        ),
        timing=Timing.SHORT_TERM,
        rationale="Perfil integrador valoriza impacto positivo nas pessoas",
        priority=Priority.MEDIUM,
        objection_handling="Foque em suporte, treinamento e benefícios colaborativos",
        next_steps=[
            "Organizar workshop com a equipe",
            "Apresentar plano de treinamento",
            "Destacar suporte continuado",
        ],
    ),
}

DEFAULT_PROFILE = Profile.ANALYTICAL


def recommend(profile, context: Optional[RecommendationContext] = None) -> Recommendation:
    """
    Return the coaching template for a profile.

    Unknown or missing profiles get the ANALYTICAL template. The sales stage in
    the context is accepted but the templates are keyed by profile only.
    """
    context = context or RecommendationContext()
    resolved = normalize_profile(profile) or DEFAULT_PROFILE
    template = RECOMMENDATION_TEMPLATES[resolved]

    logger.info(
        "Template recommendation for %s (%s stage): %s",
        resolved.value, context.sales_stage.value, template.immediate_action
    )
    return template.model_copy(deep=True)
