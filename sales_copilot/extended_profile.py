import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .llm_scorer import LLMClient, decode_response, format_context
from .rules import clamp
from .schemas import (
    BehavioralAxes, ExtendedProfile, Profile, ProfileTraits, normalize_profile
)

logger = logging.getLogger(__name__)


SUBTYPES_BY_PROFILE: Dict[Profile, List[str]] = {
    Profile.PRAGMATIC: ["Empreendedor", "Estrategista", "Ponderador"],
    Profile.INTUITIVE: ["Influenciador", "Engajador", "Agregador", "Formador de relacionamentos"],
    Profile.ANALYTICAL: ["Pensador entusiasta", "Adaptador"],
    Profile.INTEGRATOR: ["Facilitador"],
}

# Local keyword lists, checked in enumeration order so ties favor the earlier profile
FALLBACK_KEYWORDS: Dict[Profile, List[str]] = {
    Profile.PRAGMATIC: ["resultado", "eficiente", "rápido", "direto", "objetivo"],
    Profile.INTUITIVE: ["pessoas", "relacionamento", "sentir", "emoção", "conectar"],
    Profile.ANALYTICAL: ["dados", "análise", "detalhe", "informação", "estudo"],
    Profile.INTEGRATOR: ["equipe", "consenso", "harmonia", "estável", "confiança"],
}

FALLBACK_CONFIDENCE = 60
DEFAULT_CONFIDENCE = 70
DEFAULT_REASONING = "Análise baseada em padrões de comunicação identificados."
DEFAULT_TRAITS = ["Comunicativo", "Focado", "Analítico"]
DEFAULT_COMMUNICATION_STYLE = "Direto e objetivo"
DEFAULT_MOTIVATIONS = ["Resultados", "Eficiência"]


class AxesResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, allow_inf_nan=False)

    attack_defense: Optional[float] = Field(None, alias="attackDefense")
    reason_emotion: Optional[float] = Field(None, alias="reasonEmotion")


class DetailsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, allow_inf_nan=False)

    primary_traits: Optional[List[str]] = Field(None, alias="primaryTraits")
    communication_style: Optional[str] = Field(None, alias="communicationStyle")
    motivation_factors: Optional[List[str]] = Field(None, alias="motivationFactors")


class ExtendedProfileResponse(BaseModel):
    """Structured output expected from the model; missing fields are defaulted later"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True, allow_inf_nan=False)

    profile: Optional[Profile] = Field(None, alias="type")
    confidence: Optional[float] = None
    reasoning: Optional[str] = None
    subtype: Optional[str] = None
    behavioral_axes: Optional[AxesResponse] = Field(None, alias="behavioralAxes")
    details: Optional[DetailsResponse] = Field(None, alias="fdnaDetails")

    @field_validator("profile", mode="before")
    @classmethod
    def _known_profile(cls, value):
        if value is None:
            return None
        profile = normalize_profile(value)
        if profile is None:
            raise ValueError(f"unknown profile label: {value!r}")
        return profile


def resolve_subtype(profile: Profile, subtype: Optional[str]) -> str:
    """Keep the subtype only if it belongs to the profile, else use the profile's first subtype"""
    options = SUBTYPES_BY_PROFILE[profile]
    if isinstance(subtype, str):
        for option in options:
            if option.lower() == subtype.strip().lower():
                return option
    return options[0]


class ExtendedProfileClassifier:
    SYSTEM_PROMPT = (
        "Você é um especialista em análise comportamental DISC com conhecimento da metodologia FDNA. "
        "Analise com precisão e responda somente no formato JSON solicitado."
    )

    def __init__(self, client: Optional[LLMClient] = None, use_llm: bool = False):
        self.client = client
        self.use_llm = use_llm

    def classify_extended(self, transcript: str, conversation_history: Optional[List[str]] = None) -> ExtendedProfile:
        if not self.use_llm or self.client is None:
            return self._fallback_profile(transcript)

        prompt = self._build_prompt(transcript, conversation_history)
        try:
            data = self.client.complete_json(self.SYSTEM_PROMPT, prompt)
            response = decode_response(ExtendedProfileResponse, data)
        except Exception as e:
            logger.warning("Extended profile call failed, using keyword fallback: %s", e)
            return self._fallback_profile(transcript)

        result = self._format_response(response)
        logger.info("Extended profile: %s/%s (%d%% confidence)", result.profile.value, result.subtype, result.confidence)
        return result

    def _build_prompt(self, transcript: str, conversation_history: Optional[List[str]]) -> str:
        subtype_lines = "\n".join(
            f"   - {profile.value}: {' | '.join(options)}"
            for profile, options in SUBTYPES_BY_PROFILE.items()
        )
        return f"""
Analise a conversa de vendas abaixo e identifique o perfil comportamental DISC expandido.

{format_context(transcript, conversation_history)}
1. PERFIL PRINCIPAL: PRAGMATIC (resultados, direto), INTUITIVE (sociável, expressivo),
   ANALYTICAL (preciso, sistemático), INTEGRATOR (paciente, busca harmonia).
2. SUBTIPO (somente da lista do perfil escolhido):
{subtype_lines}
3. EIXOS (-100 a +100): attackDefense (ataque/defesa) e reasonEmotion (razão/emoção).
4. 3-5 traços primários, estilo de comunicação e 2-3 fatores de motivação.

RESPONDA EM JSON:
{{
  "type": "PRAGMATIC|INTUITIVE|ANALYTICAL|INTEGRATOR",
  "confidence": <0-100>,
  "reasoning": "<justificativa baseada no texto>",
  "subtype": "<subtipo>",
  "behavioralAxes": {{"attackDefense": <-100 a 100>, "reasonEmotion": <-100 a 100>}},
  "fdnaDetails": {{
    "primaryTraits": ["<traço>"],
    "communicationStyle": "<estilo>",
    "motivationFactors": ["<fator>"]
  }}
}}
"""

    def _format_response(self, response: ExtendedProfileResponse) -> ExtendedProfile:
        profile = response.profile or Profile.PRAGMATIC
        confidence = response.confidence if response.confidence is not None else DEFAULT_CONFIDENCE

        axes = response.behavioral_axes or AxesResponse()
        details = response.details or DetailsResponse()

        return ExtendedProfile(
            profile=profile,
            confidence=int(round(clamp(confidence, 0, 100))),
            reasoning=response.reasoning or DEFAULT_REASONING,
            subtype=resolve_subtype(profile, response.subtype),
            axes=BehavioralAxes(
                attack_defense=int(round(clamp(axes.attack_defense or 0, -100, 100))),
                reason_emotion=int(round(clamp(axes.reason_emotion or 0, -100, 100))),
            ),
            traits=ProfileTraits(
                primary_traits=details.primary_traits or list(DEFAULT_TRAITS),
                communication_style=details.communication_style or DEFAULT_COMMUNICATION_STYLE,
                motivation_factors=details.motivation_factors or list(DEFAULT_MOTIVATIONS),
            ),
            source="llm",
        )

    def _fallback_profile(self, transcript: str) -> ExtendedProfile:
        """Keyword-count classification used when the model is disabled or fails"""
        lowered = transcript.lower()
        scores = {
            profile: sum(1 for keyword in keywords if keyword in lowered)
            for profile, keywords in FALLBACK_KEYWORDS.items()
        }
        # max() keeps the first of equal scores, i.e. enumeration order
        top_profile = max(scores, key=scores.get)

        return ExtendedProfile(
            profile=top_profile,
            confidence=FALLBACK_CONFIDENCE,
            reasoning="Análise de fallback baseada em palavras-chave identificadas no texto.",
            subtype=SUBTYPES_BY_PROFILE[top_profile][0],
            axes=BehavioralAxes(
                attack_defense=50 if top_profile == Profile.PRAGMATIC else -20,
                reason_emotion=50 if top_profile == Profile.INTUITIVE else -30,
            ),
            traits=ProfileTraits(
                primary_traits=["Comunicativo", "Focado"],
                communication_style="Estilo padrão identificado",
                motivation_factors=["Resultados", "Relacionamentos"],
            ),
            source="fallback",
        )
