from dataclasses import dataclass, field
from typing import Dict, List, Optional


ROLES = ("system", "user", "assistant")


@dataclass
class NormalizedResult:
    title: str
    snippet: str = ""
    url: Optional[str] = None
    image: Optional[str] = None
    source: str = ""
    author: Optional[str] = None  # social adapters only

    def to_dict(self) -> Dict[str, Optional[str]]:
        data = {
            "title": self.title,
            "snippet": self.snippet,
            "url": self.url,
            "image": self.image,
            "source": self.source,
        }
        if self.author:
            data["author"] = self.author
        return data


@dataclass
class AggregatedResultSet:
    results: List[NormalizedResult] = field(default_factory=list)
    images: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.results)

    def __bool__(self) -> bool:
        return bool(self.results)

    def to_cards(self) -> List[Dict[str, Optional[str]]]:
        return [r.to_dict() for r in self.results]


@dataclass
class Turn:
    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict) -> "Turn":
        role = data.get("role")
        if role not in ROLES:
            raise ValueError(f"Unknown turn role: {role!r}")
        return cls(role=role, content=str(data.get("content", "")))


@dataclass
class ConversationRecord:
    user_id: str
    conversation: List[Turn] = field(default_factory=list)
    last_project: Optional[str] = None
    last_task: Optional[str] = None

    def append(self, role: str, content: str) -> None:
        if role not in ROLES:
            raise ValueError(f"Unknown turn role: {role!r}")
        self.conversation.append(Turn(role=role, content=content))

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "lastProject": self.last_project,
            "lastTask": self.last_task,
            "conversation": [t.to_dict() for t in self.conversation],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ConversationRecord":
        turns = data.get("conversation")
        if not isinstance(turns, list):
            raise ValueError("conversation must be a list")
        return cls(
            user_id=str(data.get("userId", "")),
            conversation=[Turn.from_dict(t) for t in turns],
            last_project=data.get("lastProject"),
            last_task=data.get("lastTask"),
        )


@dataclass
class ChatReply:
    reply: str
    news: List[Dict[str, Optional[str]]] = field(default_factory=list)
