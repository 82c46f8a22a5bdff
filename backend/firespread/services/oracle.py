"""
风险预言机服务。

预言机是外部的大模型服务，针对某个地点给出每个时间点的蔓延半径和火势描述，
以及火险分数。其输出不可信，这里负责校验和归一化。
"""

import json
import logging
import math
import re
import unicodedata
from typing import Any, Dict, List, Optional, Protocol

import google.generativeai as genai

from firespread.models.oracle import OracleResponse, OracleRiskScore, OracleTimeframe
from firespread.schemas.base import SimulationLocation

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_KM = 2.0
DEFAULT_IMPACT = "Fire spreading based on local conditions"
DEFAULT_EXPLANATION = "Fire spread simulation based on local conditions"

# 地址写入提示词前的长度上限
MAX_ADDRESS_LENGTH = 120

_INJECTION_PATTERNS: List[re.Pattern] = [
    re.compile(r"ignore\s+(all\s+)?previous", re.IGNORECASE),
    re.compile(r"(disregard|forget)\s+.*(instruction|rule|prompt)", re.IGNORECASE),
    re.compile(r"(system|assistant)\s*[:\[{]", re.IGNORECASE),
    re.compile(r"<(system|instruction|rule|prompt)[\s/>]", re.IGNORECASE),
    re.compile(r"new\s+(system\s+)?instruction", re.IGNORECASE),
]


class OracleError(Exception):
    """预言机调用失败或返回格式错误。"""


class RiskOracle(Protocol):
    """风险预言机接口，测试中可替换为确定性的实现。"""

    async def fetch_timeframes(
        self, location: SimulationLocation, date: Optional[str] = None
    ) -> OracleResponse:
        ...

    async def assess_risk(
        self, location: SimulationLocation, date: Optional[str] = None
    ) -> OracleRiskScore:
        ...


def sanitize_address(address: Optional[str]) -> Optional[str]:
    """
    清理用户输入的地址，防止提示词注入。

    Returns:
        清理后的地址；为空或可疑时返回 None
    """
    if not address or not address.strip():
        return None
    address = unicodedata.normalize("NFKC", address)[:MAX_ADDRESS_LENGTH]
    address = re.sub(r"[\x00-\x1f\x7f]", " ", address)
    for pattern in _INJECTION_PATTERNS:
        if pattern.search(address):
            logger.warning("Rejected suspicious address input")
            return None
    return address.strip() or None


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def parse_oracle_payload(
    payload: Any, default_radius_km: float = DEFAULT_RADIUS_KM
) -> OracleResponse:
    """
    校验并归一化预言机返回的时间线。

    - radius 缺失或非数字时取 default_radius_km（默认 2 公里）
    - impact 缺失时取通用描述
    - hours 缺失或非数字的条目丢弃，其余按小时排序、去重

    Args:
        payload: 预言机返回的 JSON 对象
        default_radius_km: radius 不可用时的半径（公里）

    Returns:
        归一化后的时间线

    Raises:
        OracleError: 没有可用的时间帧
    """
    if not isinstance(payload, dict):
        raise OracleError("Oracle payload is not an object")

    raw_frames = payload.get("timeframes")
    if not isinstance(raw_frames, list) or not raw_frames:
        raise OracleError("Oracle payload has no timeframes")

    by_hours: Dict[float, OracleTimeframe] = {}
    for raw in raw_frames:
        if not isinstance(raw, dict) or not _is_number(raw.get("hours")):
            continue
        hours = float(raw["hours"])
        if hours < 0 or hours in by_hours:
            continue

        radius = raw.get("radius")
        impact = raw.get("impact")
        by_hours[hours] = OracleTimeframe(
            hours=hours,
            radius_km=float(radius) if _is_number(radius) else default_radius_km,
            impact=impact if isinstance(impact, str) and impact.strip() else DEFAULT_IMPACT,
        )

    if not by_hours:
        raise OracleError("Oracle payload has no usable timeframes")

    explanation = payload.get("explanation")
    return OracleResponse(
        timeframes=[by_hours[h] for h in sorted(by_hours)],
        explanation=explanation if isinstance(explanation, str) and explanation else DEFAULT_EXPLANATION,
    )


def parse_risk_payload(payload: Any) -> OracleRiskScore:
    """校验预言机返回的火险分数。"""
    if not isinstance(payload, dict) or not _is_number(payload.get("riskScore")):
        raise OracleError("Oracle risk payload has no numeric riskScore")
    explanation = payload.get("explanation")
    return OracleRiskScore(
        risk_score=float(payload["riskScore"]),
        explanation=explanation if isinstance(explanation, str) else "",
    )


def _describe_location(location: SimulationLocation) -> str:
    address = sanitize_address(location.address)
    coords = f"({location.lat}, {location.lng})"
    return f"{address} {coords}" if address else coords


def build_spread_prompt(location: SimulationLocation, date: Optional[str]) -> str:
    """构造蔓延时间线提示词。"""
    return (
        "Given the following location, analyze how a potential wildfire might spread over time:\n"
        f"Location: {_describe_location(location)}\n"
        f"Date: {date or 'today'}\n\n"
        "Consider local terrain and elevation, vegetation density and type, weather "
        "conditions (wind patterns, humidity), urban development, natural barriers and "
        "wind direction and speed.\n\n"
        "For each timeframe (12 hours, 24 hours, 48 hours, and 96 hours), provide a "
        "realistic spread radius in kilometers from the origin point and a description "
        "of the fire's impact and behavior.\n\n"
        'Respond with JSON: {"timeframes": [{"hours": number, "radius": number, '
        '"impact": string}], "explanation": string}'
    )


def build_risk_prompt(location: SimulationLocation, date: Optional[str]) -> str:
    """构造火险评估提示词。"""
    return (
        "Given the following location and date, assess the wildfire risk:\n"
        f"Location: {_describe_location(location)}\n"
        f"Date: {date or 'today'}\n\n"
        "Consider historical fire patterns, climate conditions, vegetation and urban "
        "proximity, and scale the risk with the time of year. Areas with the highest "
        "risk such as California during the summer are close to 100, low risk areas "
        "such as the Northeast during the winter are close to 10.\n\n"
        'Respond with JSON: {"riskScore": number between 10 and 100, '
        '"explanation": string of 2-3 concise sentences}'
    )


class GeminiRiskOracle:
    """基于 Google Gemini 的风险预言机。"""

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = "gemini-1.5-flash",
        default_radius_km: float = DEFAULT_RADIUS_KM,
    ):
        """
        初始化 Gemini 预言机。

        Args:
            api_key: Gemini API Key，为空时所有调用都会抛出 OracleError
            model_name: 模型名称
            default_radius_km: 返回的 radius 不可用时的半径（公里）
        """
        self.model_name = model_name
        self.default_radius_km = default_radius_km
        self._model = None
        if api_key:
            genai.configure(api_key=api_key)
            self._model = genai.GenerativeModel(
                model_name,
                generation_config={"response_mime_type": "application/json"},
            )
        else:
            logger.warning("Gemini API key not configured, oracle calls will fall back")

    async def _generate_json(self, prompt: str) -> Any:
        if self._model is None:
            raise OracleError("Gemini API key not configured")
        try:
            response = await self._model.generate_content_async(prompt)
            return json.loads(response.text)
        except json.JSONDecodeError as e:
            raise OracleError(f"Gemini returned invalid JSON: {e}") from e
        except Exception as e:
            raise OracleError(f"Gemini request failed: {e}") from e

    async def fetch_timeframes(
        self, location: SimulationLocation, date: Optional[str] = None
    ) -> OracleResponse:
        payload = await self._generate_json(build_spread_prompt(location, date))
        logger.debug(f"Gemini spread response: {payload}")
        return parse_oracle_payload(payload, self.default_radius_km)

    async def assess_risk(
        self, location: SimulationLocation, date: Optional[str] = None
    ) -> OracleRiskScore:
        payload = await self._generate_json(build_risk_prompt(location, date))
        return parse_risk_payload(payload)
