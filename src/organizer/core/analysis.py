"""Entity extraction from free text - prompt and response parsing."""

import json
import re
from dataclasses import dataclass, field

SYSTEM_PROMPT = """\
You are an AI assistant that analyzes text and extracts structured information.
Extract the following types of entities from the provided text:
1. People: Identify individuals mentioned, with details like names, roles, and contact info.
2. Projects: Identify projects mentioned, with details like title, status, and priority.
3. Tasks: Identify tasks or action items, with details like title, status, and due dates.
4. Behaviors: Identify behaviors or patterns mentioned, with details like type and description.
5. Meetings: Identify meetings mentioned, with details like title, location, and time.

Also provide a brief summary of the text.

Format your response as a valid JSON object with the following structure:
{
  "people": [{"name": "Person Name", "confidence": 0.95, "details": {"firstName": "...", "lastName": "...", "email": "...", "organization": "...", "notes": "..."}}],
  "projects": [{"name": "Project Name", "confidence": 0.9, "details": {"title": "...", "description": "...", "status": "...", "priority": "..."}}],
  "tasks": [{"name": "Task Name", "confidence": 0.85, "details": {"title": "...", "description": "...", "status": "...", "priority": "...", "dueDate": "..."}}],
  "behaviors": [{"name": "Behavior Name", "confidence": 0.8, "details": {"title": "...", "description": "...", "type": "..."}}],
  "meetings": [{"name": "Meeting Name", "confidence": 0.9, "details": {"title": "...", "description": "...", "location": "...", "startTime": "..."}}],
  "summary": "Brief summary of the text..."
}

For status and priority fields, use values like:
- Status: "notStarted", "inProgress", "onHold", "completed", "cancelled", "active", "planning"
- Priority: "low", "medium", "high", "urgent"
- Behavior types: "doWell", "wantToDoBetter", "needToImprove"

Provide confidence scores between 0 and 1 indicating how confident you are in each entity extraction.
If a field is not applicable or not mentioned, omit it from the details.
Return only the JSON with no additional text.
"""

NO_SUMMARY = "No summary available"

_FENCE = re.compile(r"^```(?:json)?\s*\n(.*?)\n?```$", re.DOTALL)

_ENTITY_KINDS = {
    "people": "person",
    "projects": "project",
    "tasks": "task",
    "behaviors": "behavior",
    "meetings": "meeting",
}


@dataclass
class Entity:
    type: str
    name: str
    confidence: float = 0.5
    details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "name": self.name,
            "confidence": self.confidence,
            "details": dict(self.details),
        }


@dataclass
class AnalysisResult:
    people: list[Entity] = field(default_factory=list)
    projects: list[Entity] = field(default_factory=list)
    tasks: list[Entity] = field(default_factory=list)
    behaviors: list[Entity] = field(default_factory=list)
    meetings: list[Entity] = field(default_factory=list)
    summary: str = NO_SUMMARY

    def to_dict(self) -> dict:
        result = {key: [e.to_dict() for e in getattr(self, key)] for key in _ENTITY_KINDS}
        result["summary"] = self.summary
        return result


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    text = text.strip()
    match = _FENCE.match(text)
    if match:
        return match.group(1).strip()
    return text


def _entity(raw, kind: str) -> Entity:
    if not isinstance(raw, dict):
        raw = {"name": str(raw)}
    confidence = raw.get("confidence")
    if not isinstance(confidence, (int, float)) or isinstance(confidence, bool):
        confidence = 0.5
    return Entity(
        type=kind,
        name=raw.get("name") or f"Unnamed {kind}",
        confidence=float(confidence),
        details=raw.get("details") if isinstance(raw.get("details"), dict) else {},
    )


def parse_analysis(text: str) -> AnalysisResult:
    """
    Parse a model response into an AnalysisResult.

    Missing or non-list entity groups become empty lists. Raises ValueError
    when the response is not a JSON object.

    Pure function - no I/O.
    """
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise ValueError(f"Analysis response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Analysis response is not a JSON object")

    result = AnalysisResult(summary=data.get("summary") or NO_SUMMARY)
    for key, kind in _ENTITY_KINDS.items():
        items = data.get(key)
        if isinstance(items, list):
            setattr(result, key, [_entity(item, kind) for item in items])
    return result
