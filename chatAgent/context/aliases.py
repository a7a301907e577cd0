"""
用户别名注册表

负责：
1. 持有所有已知参与者及其显示别名列表（arena + index）
2. 将参与者引用解析为稳定的位置索引（u{i}）
3. 渲染别名表供模型引用参与者
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, TYPE_CHECKING
import logging

from chatAgent.errors import ParticipantNotFound

if TYPE_CHECKING:
    from .token_counter import TokenCounter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticipantRef:
    """
    参与者的非拥有引用

    index 指向注册表中的槽位；aliases 是引用创建时别名列表的快照。
    同一参与者的判定基于别名列表的值相等，而不是存储地址。
    """
    index: int
    aliases: Tuple[str, ...] = ()

    @property
    def display_name(self) -> Optional[str]:
        """首个别名为规范显示名；空列表表示未知参与者"""
        return self.aliases[0] if self.aliases else None


class UserAliasRegistry:
    """参与者别名注册表，参与者在整个上下文生命周期内保留"""

    def __init__(self):
        self._users: List[List[str]] = []

    def register_new(self) -> ParticipantRef:
        """追加一个空别名列表（未知参与者）"""
        self._users.append([])
        return self.ref(len(self._users) - 1)

    def register_existing(self, aliases: List[str]) -> ParticipantRef:
        """追加一个已有别名的参与者"""
        self._users.append(list(aliases))
        return self.ref(len(self._users) - 1)

    def ref(self, index: int) -> ParticipantRef:
        """为槽位生成当前别名的引用"""
        if not 0 <= index < len(self._users):
            raise ParticipantNotFound(f"No participant at index {index}")
        return ParticipantRef(index=index, aliases=tuple(self._users[index]))

    def find_index(self, ref: ParticipantRef) -> Optional[int]:
        """
        查找引用对应的索引

        先检查 ref.index 指向的槽位，再按注册顺序扫描；
        两个引用是同一参与者，当且仅当查找时它们的别名列表相等。
        """
        wanted = list(ref.aliases)
        if 0 <= ref.index < len(self._users) and self._users[ref.index] == wanted:
            return ref.index

        for index, aliases in enumerate(self._users):
            if aliases == wanted:
                return index
        return None

    def resolve(self, ref: ParticipantRef) -> List[str]:
        index = self.find_index(ref)
        if index is None:
            raise ParticipantNotFound(f"Participant {ref.aliases!r} is not registered")
        return list(self._users[index])

    def ensure(self, ref: ParticipantRef) -> int:
        """
        返回引用的索引，未注册时补登记

        未注册的引用说明调用方与注册表不一致（通常是 bug），记录警告后继续。
        """
        index = self.find_index(ref)
        if index is not None:
            return index

        logger.warning(
            f"Attempt to add unregistered participant {list(ref.aliases)!r} to history; "
            f"registering it as a new participant"
        )
        return self.register_existing(list(ref.aliases)).index

    def get_aliases(self, index: int) -> Optional[List[str]]:
        if not 0 <= index < len(self._users):
            return None
        return list(self._users[index])

    def __len__(self) -> int:
        return len(self._users)

    def __iter__(self) -> Iterator[Tuple[int, List[str]]]:
        for index, aliases in enumerate(self._users):
            yield index, list(aliases)

    def render_alias_table(self, counter: "TokenCounter", budget: int) -> Optional[str]:
        """
        渲染别名表：每行 `u{i}: alias1, alias2`

        没有别名的参与者不输出；超出 alias 预算的行被丢弃。
        """
        lines: List[str] = []
        used = 0
        for index, aliases in enumerate(self._users):
            if not aliases:
                continue
            line = f"u{index}: {', '.join(aliases)}"
            cost = counter.count_text(line + "\n")
            if used + cost > budget:
                logger.warning(
                    f"Alias table truncated at participant u{index}: "
                    f"{used + cost} tokens exceeds alias budget {budget}"
                )
                break
            lines.append(line)
            used += cost

        if not lines:
            return None
        return "\n".join(lines)
