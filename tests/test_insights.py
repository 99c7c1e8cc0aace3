from sales_copilot.extended_profile import ExtendedProfileClassifier
from sales_copilot.insights import BehavioralAnalyzer, combine
from sales_copilot.personality import PersonalityClassifier, fallback_personality_profile
from sales_copilot.schemas import (
    BehavioralAxes, ExtendedProfile, PersonalityDimensions, PersonalityTypeProfile,
    Profile, ProfileTraits
)


def extended(profile=Profile.PRAGMATIC, subtype="Estrategista", motivations=None):
    return ExtendedProfile(
        profile=profile,
        confidence=75,
        reasoning="teste",
        subtype=subtype,
        axes=BehavioralAxes(attack_defense=40, reason_emotion=-20),
        traits=ProfileTraits(
            primary_traits=["Direto"],
            communication_style="Objetivo e rápido",
            motivation_factors=["Eficiência"] if motivations is None else motivations,
        ),
        source="llm",
    )


def personality(code="ISTJ", strengths=None):
    return PersonalityTypeProfile(
        type_code=code,
        dimensions=PersonalityDimensions(),
        confidence=70,
        description="teste",
        strengths=["Organização"] if strengths is None else strengths,
        source="llm",
    )


class TestCombine:
    def test_templated_fields(self):
        insights = combine(extended(), personality())

        assert insights.immediate_action == (
            "Baseado no perfil PRAGMATIC, Estrategista: ajuste sua abordagem para ser mais estrategista."
        )
        assert insights.script == (
            '"Entendo que você valoriza Eficiência. '
            'Deixe-me mostrar como nossa solução atende exatamente isso..."'
        )
        assert insights.disc_based_strategy.startswith("Foque em resultados concretos")
        assert insights.mbti_based_approach == "Pessoa introvertida - dê tempo para reflexão - Tipo ISTJ"
        assert insights.combined_insights == (
            "Cliente PRAGMATIC/ISTJ: Objetivo e rápido. Organização é um ponto forte para abordar."
        )

    def test_strategy_per_profile(self):
        insights = combine(extended(Profile.INTEGRATOR, "Facilitador"), personality("ENFP"))

        assert insights.disc_based_strategy.startswith("Construa relacionamento")
        assert insights.mbti_based_approach.startswith("Pessoa extrovertida")

    def test_empty_lists_do_not_break_templates(self):
        insights = combine(extended(motivations=[]), personality(strengths=[]))

        assert "valoriza resultados" in insights.script
        assert "Comunicação é um ponto forte" in insights.combined_insights


class TestBehavioralAnalyzer:
    def test_fallback_analysis(self):
        analyzer = BehavioralAnalyzer()
        transcript = "Quero um resultado rápido e direto."

        result = analyzer.analyze_complete(transcript)

        assert result.transcript == transcript
        assert result.extended.profile == Profile.PRAGMATIC
        assert result.extended.source == "fallback"
        assert result.personality == fallback_personality_profile()
        assert result.recommendations.combined_insights == (
            "Cliente PRAGMATIC/ENFP: Estilo padrão identificado. Comunicação é um ponto forte para abordar."
        )

    def test_classifiers_are_injected(self):
        class FailingClient:
            def complete_json(self, system_prompt, prompt):
                raise TimeoutError("model timed out")

        client = FailingClient()
        analyzer = BehavioralAnalyzer(
            ExtendedProfileClassifier(client=client, use_llm=True),
            PersonalityClassifier(client=client, use_llm=True),
        )

        result = analyzer.analyze_complete("Nossa equipe busca consenso.", ["Olá", "Tudo bem?"])

        assert result.extended.profile == Profile.INTEGRATOR
        assert result.extended.source == "fallback"
        assert result.personality.source == "fallback"
