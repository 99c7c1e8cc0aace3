import re
from pathlib import Path
from typing import List, Optional

from ..schemas import Conversation, SpeakerRole, Utterance


SELLER_NAMES = {"me", "eu", "vendedor", "vendedora", "seller", "sales", "rep"}
CLIENT_NAMES = {"them", "cliente", "client", "customer", "prospect"}


def speaker_role(speaker: Optional[str]) -> SpeakerRole:
    if not speaker:
        return SpeakerRole.UNKNOWN
    name = speaker.strip().lower()
    if name in SELLER_NAMES:
        return SpeakerRole.SELLER
    if name in CLIENT_NAMES:
        return SpeakerRole.CLIENT
    return SpeakerRole.UNKNOWN


class PlaintextImporter:
    """
    Reads call transcripts saved as plain text.

    Recognised lines are "[hh:mm] Speaker: text", "[hh:mm:ss] Speaker: text"
    and "Speaker: text". An optional title line and a "Participants:" line may
    precede the dialogue.
    """

    def __init__(self):
        self.timestamp_pattern = re.compile(r'\[(\d{2}:\d{2}:\d{2}|\d{2}:\d{2})\]\s*([^:]+):\s*(.+)')
        self.speaker_pattern = re.compile(r'^([^:\[]{1,40}):\s*(.+)')

    def parse_file(self, file_path: Path) -> Conversation:
        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()
        return self.parse_text(content, conversation_id=file_path.stem)

    def parse_text(self, content: str, conversation_id: str) -> Conversation:
        lines = content.split('\n')
        return Conversation(
            conversation_id=conversation_id,
            title=self._extract_title(lines),
            participants=self._extract_participants(lines),
            utterances=self._extract_utterances(lines),
            source='plaintext',
        )

    def _extract_title(self, lines: List[str]) -> Optional[str]:
        for line in lines[:5]:
            stripped = line.strip()
            if not stripped or stripped.startswith('['):
                continue
            if ' - ' in stripped and not self._is_metadata(stripped):
                return stripped
        return None

    def _extract_participants(self, lines: List[str]) -> List[str]:
        for line in lines[:10]:
            if 'Participants:' in line or 'Participantes:' in line:
                participants_str = re.sub(r'(Participants:|Participantes:)', '', line).strip()
                return [p.strip() for p in re.split(r'[,;]', participants_str) if p.strip()]
        return []

    def _extract_utterances(self, lines: List[str]) -> List[Utterance]:
        utterances = []

        for line in lines:
            stripped = line.strip()
            if not stripped or self._is_metadata(stripped):
                continue

            timestamp_match = self.timestamp_pattern.match(stripped)
            if timestamp_match:
                speaker = timestamp_match.group(2).strip()
                utterances.append(Utterance(
                    t=timestamp_match.group(1),
                    speaker=speaker,
                    role=speaker_role(speaker),
                    text=timestamp_match.group(3).strip(),
                ))
                continue

            speaker_match = self.speaker_pattern.match(stripped)
            if speaker_match:
                speaker = speaker_match.group(1).strip()
                utterances.append(Utterance(
                    t=None,
                    speaker=speaker,
                    role=speaker_role(speaker),
                    text=speaker_match.group(2).strip(),
                ))

        return utterances

    def _is_metadata(self, line: str) -> bool:
        return line.startswith(('Date:', 'Data:', 'Participants:', 'Participantes:', '#'))
