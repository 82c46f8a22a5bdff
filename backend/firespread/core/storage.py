"""
模拟存储模块。

使用内存存储已接受的模拟以及各会话的最新请求。
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from firespread.models.simulation import FireSimulation


class SimulationStorage:
    """模拟存储（内存）。"""

    def __init__(self):
        self._simulations: Dict[str, FireSimulation] = {}

    def add(self, simulation: FireSimulation) -> None:
        """添加模拟。"""
        self._simulations[simulation.simulation_id] = simulation

    def get(self, simulation_id: str) -> Optional[FireSimulation]:
        """获取模拟。"""
        return self._simulations.get(simulation_id)

    def remove(self, simulation_id: str) -> Optional[FireSimulation]:
        """删除模拟，返回被删除的对象。"""
        return self._simulations.pop(simulation_id, None)

    def list_simulations(self) -> List[FireSimulation]:
        """列出所有模拟。"""
        return list(self._simulations.values())

    def clear(self) -> None:
        self._simulations.clear()


@dataclass
class SessionEntry:
    """会话状态：最新请求序号、进行中的请求数和当前模拟。"""

    latest_request: int = 0
    pending: int = 0  # 尚未结束的请求数
    simulation_id: Optional[str] = None


class SessionRegistry:
    """
    会话登记表。

    每个会话（前端的地点焦点）只认最新一次请求，较早请求的结果到达时被丢弃。
    会话既没有模拟也没有进行中的请求时，其登记项被移除。
    """

    def __init__(self):
        self._sessions: Dict[str, SessionEntry] = {}

    def begin_request(self, session_id: str) -> int:
        """登记一次新请求，返回请求序号。"""
        entry = self._sessions.setdefault(session_id, SessionEntry())
        entry.latest_request += 1
        entry.pending += 1
        return entry.latest_request

    def finish_request(self, session_id: str) -> None:
        """请求结束（无论结果是否被接受）。"""
        entry = self._sessions.get(session_id)
        if entry is None:
            return
        entry.pending = max(entry.pending - 1, 0)
        self.discard_if_idle(session_id)

    def discard_if_idle(self, session_id: str) -> bool:
        """会话空闲时移除登记项，返回是否已移除。"""
        entry = self._sessions.get(session_id)
        if entry is None or entry.pending > 0 or entry.simulation_id is not None:
            return False
        del self._sessions[session_id]
        return True

    def is_latest(self, session_id: str, request_no: int) -> bool:
        """判断请求是否仍是该会话的最新请求。"""
        entry = self._sessions.get(session_id)
        return entry is not None and entry.latest_request == request_no

    def current_simulation(self, session_id: str) -> Optional[str]:
        """会话当前的模拟 ID。"""
        entry = self._sessions.get(session_id)
        return entry.simulation_id if entry else None

    def set_simulation(self, session_id: str, simulation_id: Optional[str]) -> None:
        entry = self._sessions.setdefault(session_id, SessionEntry())
        entry.simulation_id = simulation_id

    def __len__(self) -> int:
        return len(self._sessions)

    def clear(self) -> None:
        self._sessions.clear()


# 全局存储实例
simulation_storage = SimulationStorage()
session_registry = SessionRegistry()
