from sales_copilot.importers.plaintext import PlaintextImporter, speaker_role
from sales_copilot.schemas import Conversation, SpeakerRole


CALL_TRANSCRIPT = """Discovery call - Acme Ltda
Participants: Ana (Vendedor), Bruno (Cliente)

[10:00] Vendedor: Olá Bruno, obrigado pelo tempo.
[10:01] Cliente: Preciso saber quanto custa e quando posso ver resultado.
[10:02:30] Vendedor: Claro, vou mostrar os números.
Cliente: Qual é o ROI concreto?
"""


class TestPlaintextImporter:
    def setup_method(self):
        self.importer = PlaintextImporter()

    def test_parse_file(self, tmp_path):
        path = tmp_path / "acme-discovery.txt"
        path.write_text(CALL_TRANSCRIPT, encoding="utf-8")

        conversation = self.importer.parse_file(path)

        assert isinstance(conversation, Conversation)
        assert conversation.conversation_id == "acme-discovery"
        assert conversation.source == "plaintext"
        assert conversation.title == "Discovery call - Acme Ltda"
        assert conversation.participants == ["Ana (Vendedor)", "Bruno (Cliente)"]
        assert len(conversation.utterances) == 4

    def test_timestamps_and_roles(self):
        conversation = self.importer.parse_text(CALL_TRANSCRIPT, "call")
        utterances = conversation.utterances

        assert [u.t for u in utterances] == ["10:00", "10:01", "10:02:30", None]
        assert [u.role for u in utterances] == [
            SpeakerRole.SELLER, SpeakerRole.CLIENT, SpeakerRole.SELLER, SpeakerRole.CLIENT
        ]
        assert utterances[1].text == "Preciso saber quanto custa e quando posso ver resultado."

    def test_classification_input_uses_client_side(self):
        data = self.importer.parse_text(CALL_TRANSCRIPT, "call").to_classification_input()

        assert data.transcript == (
            "Preciso saber quanto custa e quando posso ver resultado. Qual é o ROI concreto?"
        )
        assert data.speaker_role == SpeakerRole.CLIENT
        assert len(data.conversation_history) == 4

    def test_without_client_tags_uses_everything(self):
        data = self.importer.parse_text("Ana: Oi\nBruno: Tudo bem", "call").to_classification_input()

        assert data.transcript == "Oi Tudo bem"
        assert data.speaker_role == SpeakerRole.UNKNOWN

    def test_no_dialogue(self):
        conversation = self.importer.parse_text("Só uma nota solta sem falas", "notes")
        assert conversation.utterances == []


class TestSpeakerRole:
    def test_known_names(self):
        assert speaker_role("Me") == SpeakerRole.SELLER
        assert speaker_role("vendedor") == SpeakerRole.SELLER
        assert speaker_role("Them") == SpeakerRole.CLIENT
        assert speaker_role(" Client ") == SpeakerRole.CLIENT

    def test_other_names(self):
        assert speaker_role("Bruno") == SpeakerRole.UNKNOWN
        assert speaker_role(None) == SpeakerRole.UNKNOWN
