import pytest

from sales_copilot.audio import MOCK_TRANSCRIPTS, AudioService, mock_features, mock_speaker_role
from sales_copilot.schemas import AcousticFeatures, AudioSegment, SessionStatus, SpeakerRole
from sales_copilot.sessions import InMemorySessionRepository, SessionNotFoundError


def make_segment(session_id, text="Olá"):
    return AudioSegment(
        id="seg-1",
        session_id=session_id,
        timestamp=1700000000000,
        duration=3000,
        speaker_role=SpeakerRole.CLIENT,
        transcript=text,
        audio_features=AcousticFeatures(pace=120, volume=50, pitch=150, energy=50, pause_frequency=4),
    )


class TestInMemorySessionRepository:
    def setup_method(self):
        self.repository = InMemorySessionRepository()

    def test_create_and_get(self):
        session = self.repository.create("user-1", client_name="Bruno", client_company="Acme")

        fetched = self.repository.get(session.id)
        assert fetched == session
        assert fetched.status == SessionStatus.ACTIVE
        assert fetched.client_company == "Acme"
        assert fetched.segments == []

    def test_unknown_session(self):
        assert self.repository.get("missing") is None
        with pytest.raises(SessionNotFoundError):
            self.repository.append_segment(make_segment("missing"))
        with pytest.raises(SessionNotFoundError):
            self.repository.end("missing")

    def test_append_keeps_order(self):
        session = self.repository.create("user-1")
        self.repository.append_segment(make_segment(session.id, "primeiro"))
        self.repository.append_segment(make_segment(session.id, "segundo"))

        texts = [s.transcript for s in self.repository.get(session.id).segments]
        assert texts == ["primeiro", "segundo"]

    def test_end_session(self):
        session = self.repository.create("user-1")
        ended = self.repository.end(session.id)

        assert ended.status == SessionStatus.COMPLETED
        assert ended.end_time is not None
        assert self.repository.get(session.id).status == SessionStatus.COMPLETED

    def test_list_for_user(self):
        first = self.repository.create("user-1")
        self.repository.create("user-2")
        second = self.repository.create("user-1")

        ids = {s.id for s in self.repository.list_for_user("user-1")}
        assert ids == {first.id, second.id}

    def test_callers_get_copies(self):
        session = self.repository.create("user-1")
        fetched = self.repository.get(session.id)
        fetched.segments.append(make_segment(session.id))

        assert self.repository.get(session.id).segments == []


class TestAudioService:
    def setup_method(self):
        self.repository = InMemorySessionRepository()
        self.service = AudioService(self.repository)
        self.session = self.repository.create("user-1")

    def test_process_segment_appends_to_session(self):
        segment = self.service.process_segment(self.session.id, b"chunk-1", timestamp=1234)

        assert segment.session_id == self.session.id
        assert segment.timestamp == 1234
        assert segment.duration == 3000
        assert segment.transcript in MOCK_TRANSCRIPTS
        assert self.repository.get(self.session.id).segments == [segment]

    def test_same_audio_gives_same_output(self):
        first = self.service.process_segment(self.session.id, b"same-bytes")
        second = self.service.process_segment(self.session.id, b"same-bytes")

        assert first.id != second.id
        assert first.transcript == second.transcript
        assert first.audio_features == second.audio_features
        assert first.speaker_role == second.speaker_role

    def test_mock_features_in_range(self):
        for i in range(20):
            features = mock_features(f"audio-{i}".encode())
            assert 100 <= features.pace <= 199
            assert 0 <= features.volume <= 99
            assert 100 <= features.pitch <= 299
            assert 0 <= features.pause_frequency <= 10

    def test_speaker_role_is_seller_or_client(self):
        roles = {mock_speaker_role(f"audio-{i}".encode()) for i in range(50)}
        assert roles <= {SpeakerRole.SELLER, SpeakerRole.CLIENT}

    def test_default_timestamp(self):
        segment = self.service.process_segment(self.session.id, b"chunk")
        assert segment.timestamp > 1600000000000

    def test_empty_audio_rejected(self):
        with pytest.raises(ValueError):
            self.service.process_segment(self.session.id, b"")

    def test_unknown_session(self):
        with pytest.raises(SessionNotFoundError):
            self.service.process_segment("missing", b"chunk")
