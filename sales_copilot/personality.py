import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .llm_scorer import LLMClient, decode_response, format_context
from .rules import clamp
from .schemas import PersonalityDimensions, PersonalityTypeProfile

logger = logging.getLogger(__name__)


# (positive letter, letter for zero or negative)
DIMENSION_LETTERS = [
    ("extraversion", "E", "I"),
    ("sensing", "S", "N"),
    ("thinking", "T", "F"),
    ("judging", "J", "P"),
]

PERSONALITY_TYPES = {
    "ENFP": {
        "description": "Entusiasta, criativo e sociável. Busca possibilidades e inspira outros.",
        "strengths": ["Criatividade", "Entusiasmo", "Flexibilidade", "Conexão pessoal"],
        "development_areas": ["Foco em detalhes", "Planejamento estruturado", "Follow-through"],
    },
    "ENFJ": {
        "description": "Carismático e inspirador. Natural líder focado no desenvolvimento das pessoas.",
        "strengths": ["Liderança", "Empatia", "Comunicação", "Visão de futuro"],
        "development_areas": ["Objetividade", "Tomada de decisões difíceis", "Autocuidado"],
    },
    "ENTP": {
        "description": "Inovador e questionador. Adora debater ideias e explorar possibilidades.",
        "strengths": ["Inovação", "Pensamento estratégico", "Adaptabilidade", "Networking"],
        "development_areas": ["Execução consistente", "Atenção aos detalhes", "Rotina"],
    },
    "ENTJ": {
        "description": "Líder natural, estratégico e determinado. Foca em eficiência e resultados.",
        "strengths": ["Liderança", "Estratégia", "Decisão", "Organização"],
        "development_areas": ["Paciência", "Sensibilidade interpessoal", "Flexibilidade"],
    },
    "ESFP": {
        "description": "Espontâneo e amigável. Traz energia positiva e foca no momento presente.",
        "strengths": ["Espontaneidade", "Otimismo", "Relacionamento", "Adaptabilidade"],
        "development_areas": ["Planejamento de longo prazo", "Disciplina", "Análise crítica"],
    },
    "ESFJ": {
        "description": "Prestativo e organizado. Focado em atender necessidades dos outros.",
        "strengths": ["Organização", "Lealdade", "Suporte", "Responsabilidade"],
        "development_areas": ["Assertividade", "Mudanças", "Crítica construtiva"],
    },
    "ESTP": {
        "description": "Pragmático e energético. Prefere ação a planejamento.",
        "strengths": ["Ação imediata", "Pragmatismo", "Flexibilidade", "Solução de problemas"],
        "development_areas": ["Planejamento estratégico", "Paciência", "Teoria abstrata"],
    },
    "ESTJ": {
        "description": "Organizador natural, sistemático e focado em resultados.",
        "strengths": ["Organização", "Liderança", "Eficiência", "Confiabilidade"],
        "development_areas": ["Flexibilidade", "Inovação", "Sensibilidade emocional"],
    },
    "INFP": {
        "description": "Idealista e autêntico. Busca significado e harmonia com valores pessoais.",
        "strengths": ["Autenticidade", "Criatividade", "Empatia", "Valores fortes"],
        "development_areas": ["Assertividade", "Decisões práticas", "Estrutura"],
    },
    "INFJ": {
        "description": "Visionário e determinado. Combina intuição com planejamento estruturado.",
        "strengths": ["Visão de futuro", "Determinação", "Insight", "Planejamento"],
        "development_areas": ["Flexibilidade", "Praticidade", "Assertividade"],
    },
    "INTP": {
        "description": "Pensador lógico e independente. Busca compreender sistemas complexos.",
        "strengths": ["Lógica", "Análise", "Independência", "Inovação"],
        "development_areas": ["Expressão emocional", "Prazos", "Implementação"],
    },
    "INTJ": {
        "description": "Estrategista independente. Combina visão de longo prazo com determinação.",
        "strengths": ["Estratégia", "Independência", "Visão sistêmica", "Determinação"],
        "development_areas": ["Relacionamento interpessoal", "Flexibilidade", "Trabalho em equipe"],
    },
    "ISFP": {
        "description": "Artístico e sensível. Valoriza autenticidade e harmonia.",
        "strengths": ["Sensibilidade", "Flexibilidade", "Lealdade", "Criatividade"],
        "development_areas": ["Assertividade", "Planejamento", "Confronto"],
    },
    "ISFJ": {
        "description": "Protetor dedicado e confiável. Focado em apoiar e cuidar dos outros.",
        "strengths": ["Dedicação", "Confiabilidade", "Atenção aos detalhes", "Suporte"],
        "development_areas": ["Assertividade", "Mudanças", "Autocuidado"],
    },
    "ISTP": {
        "description": "Solucionador prático e adaptável. Prefere trabalhar com as mãos.",
        "strengths": ["Solução prática", "Adaptabilidade", "Independência", "Calma"],
        "development_areas": ["Expressão emocional", "Planejamento", "Relacionamento"],
    },
    "ISTJ": {
        "description": "Responsável e sistemático. Valoriza tradição, lealdade e hard work.",
        "strengths": ["Responsabilidade", "Organização", "Confiabilidade", "Atenção aos detalhes"],
        "development_areas": ["Flexibilidade", "Inovação", "Expressão pessoal"],
    },
}

DEFAULT_CONFIDENCE = 70


class DimensionsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, allow_inf_nan=False)

    extraversion: Optional[float] = Field(None, alias="extroversion")
    sensing: Optional[float] = None
    thinking: Optional[float] = None
    judging: Optional[float] = None


class PersonalityResponse(BaseModel):
    """Structured output expected from the model. Any 'type' it returns is ignored."""
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    dimensions: Optional[DimensionsResponse] = None
    confidence: Optional[float] = None
    evidences: Optional[Dict[str, str]] = None


def type_code_for(dimensions: PersonalityDimensions) -> str:
    """Four-letter code implied by the dimension signs; zero maps to the second letter"""
    return "".join(
        positive if getattr(dimensions, name) > 0 else other
        for name, positive, other in DIMENSION_LETTERS
    )


def fallback_personality_profile() -> PersonalityTypeProfile:
    """Fixed profile returned whenever the model path is unavailable"""
    dimensions = PersonalityDimensions(extraversion=20, sensing=-10, thinking=-5, judging=-15)
    return PersonalityTypeProfile(
        type_code=type_code_for(dimensions),
        dimensions=dimensions,
        confidence=60,
        description="Análise de fallback - perfil equilibrado com tendências colaborativas.",
        strengths=["Comunicação", "Adaptabilidade", "Criatividade"],
        development_areas=["Estruturação", "Foco", "Planejamento"],
        source="fallback",
    )


class PersonalityClassifier:
    SYSTEM_PROMPT = (
        "Você é um especialista em análise de personalidade MBTI. Determine o tipo a partir das "
        "4 dimensões E/I, S/N, T/F, J/P e forneça evidências textuais. Responda somente em JSON."
    )

    def __init__(self, client: Optional[LLMClient] = None, use_llm: bool = False):
        self.client = client
        self.use_llm = use_llm

    def classify_personality(self, transcript: str,
                             conversation_history: Optional[List[str]] = None) -> PersonalityTypeProfile:
        if not self.use_llm or self.client is None:
            return fallback_personality_profile()

        prompt = self._build_prompt(transcript, conversation_history)
        try:
            data = self.client.complete_json(self.SYSTEM_PROMPT, prompt)
            response = decode_response(PersonalityResponse, data)
        except Exception as e:
            logger.warning("Personality call failed, using fixed fallback profile: %s", e)
            return fallback_personality_profile()

        result = self._format_response(response)
        logger.info("Personality type: %s (%d%% confidence)", result.type_code, result.confidence)
        return result

    def _build_prompt(self, transcript: str, conversation_history: Optional[List[str]]) -> str:
        return f"""
Analise a conversa abaixo e pontue cada dimensão de -100 a +100.

{format_context(transcript, conversation_history)}
1. extroversion: +100 muito extrovertido, -100 muito introvertido
2. sensing: +100 fatos concretos e detalhes, -100 possibilidades e conceitos abstratos
3. thinking: +100 lógica e objetividade, -100 valores e impacto nas pessoas
4. judging: +100 estrutura e planejamento, -100 flexibilidade e opções abertas

RESPONDA EM JSON:
{{
  "dimensions": {{"extroversion": <n>, "sensing": <n>, "thinking": <n>, "judging": <n>}},
  "type": "<tipo de 4 letras>",
  "confidence": <0-100>,
  "evidences": {{"extroversion": "<texto>", "sensing": "<texto>", "thinking": "<texto>", "judging": "<texto>"}}
}}
"""

    def _format_response(self, response: PersonalityResponse) -> PersonalityTypeProfile:
        raw = response.dimensions or DimensionsResponse()
        dimensions = PersonalityDimensions(
            extraversion=int(round(clamp(raw.extraversion or 0, -100, 100))),
            sensing=int(round(clamp(raw.sensing or 0, -100, 100))),
            thinking=int(round(clamp(raw.thinking or 0, -100, 100))),
            judging=int(round(clamp(raw.judging or 0, -100, 100))),
        )
        code = type_code_for(dimensions)
        info = PERSONALITY_TYPES[code]
        confidence = response.confidence if response.confidence is not None else DEFAULT_CONFIDENCE

        return PersonalityTypeProfile(
            type_code=code,
            dimensions=dimensions,
            confidence=int(round(clamp(confidence, 0, 100))),
            description=info["description"],
            strengths=list(info["strengths"]),
            development_areas=list(info["development_areas"]),
            evidence=response.evidences or {},
            source="llm",
        )
