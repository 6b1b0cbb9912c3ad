"""조정 요청 사유 생성 서비스 — 외부 텍스트 생성(Gemini) + 템플릿 대체.

Justification service. Turns an employee's informal description into a
professional pt-BR justification for an adjustment request through the
Gemini ``generateContent`` REST endpoint. Without an API key, or whenever the
call fails, a deterministic template per record type is returned instead.
"""

import json
import logging
from datetime import date, datetime
from typing import Any

import httpx

from ponto.config import settings
from ponto.services.attendance_validator import RecordType
from ponto.utils.dates import format_br_date
from ponto.utils.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

_RECORD_LABELS: dict[RecordType, str] = {
    RecordType.ENTRADA: "entrada",
    RecordType.PAUSA: "pausa",
    RecordType.RETORNO: "retorno",
    RecordType.SAIDA: "saída",
}

# 유형별 대체 문구 — Deterministic pt-BR templates, "{date}" is dd/mm/yyyy
_FALLBACK_TEMPLATES: dict[RecordType, str] = {
    RecordType.ENTRADA: (
        "Prezado(a) gestor(a), solicito respeitosamente o ajuste do registro de entrada do dia {date}, "
        "devido a uma situação imprevista que impediu a marcação no horário correto. Agradeço a compreensão."
    ),
    RecordType.SAIDA: (
        "Prezado(a) gestor(a), solicito respeitosamente o ajuste do registro de saída do dia {date}, "
        "pois inadvertidamente esqueci de realizar a marcação ao final do expediente. Agradeço a compreensão."
    ),
    RecordType.PAUSA: (
        "Prezado(a) gestor(a), solicito respeitosamente o ajuste do registro de pausa do dia {date}, "
        "devido a uma situação que impossibilitou a marcação no momento adequado. Agradeço a compreensão."
    ),
    RecordType.RETORNO: (
        "Prezado(a) gestor(a), solicito respeitosamente o ajuste do registro de retorno do dia {date}, "
        "pois houve um imprevisto que afetou a marcação no horário correto. Agradeço a compreensão."
    ),
}

DEFAULT_ANALYSIS: dict[str, str] = {"sentiment": "neutral", "urgency": "medium", "category": "geral"}

_JUSTIFICATION_PROMPT = """Você é um assistente especializado em gerar justificativas profissionais para solicitações de ajuste de ponto em empresas.

Contexto:
- Tipo de registro: {record_type}
- Data: {date}
- Descrição informal do colaborador: "{user_input}"

Instruções:
1. Transforme a descrição informal em uma justificativa profissional e respeitosa
2. Use linguagem corporativa adequada
3. Seja conciso mas completo
4. Inclua pedido de compreensão ao final
5. Máximo de 200 palavras

Gere apenas a justificativa, sem explicações adicionais."""

_ANALYSIS_PROMPT = """Analise o seguinte texto de justificativa de ajuste de ponto e retorne um JSON com:
- sentiment: "positive", "neutral" ou "negative"
- urgency: "low", "medium" ou "high"
- category: categoria da justificativa (ex: "esquecimento", "problema_tecnico", "emergencia")

Texto: "{text}"

Responda apenas com o JSON."""


def _coerce_record_type(record_type: str | RecordType) -> RecordType:
    try:
        return RecordType(record_type)
    except ValueError:
        return RecordType.ENTRADA


def fallback_justification(record_type: str | RecordType, on: date | datetime) -> str:
    """템플릿 사유 — 알 수 없는 유형은 entrada 템플릿 사용."""
    return _FALLBACK_TEMPLATES[_coerce_record_type(record_type)].format(date=format_br_date(on))


class JustificationService:
    """사유 생성 서비스 — Gemini REST client with template fallback."""

    @property
    def is_configured(self) -> bool:
        return bool(settings.GEMINI_API_KEY)

    async def _generate(self, prompt: str) -> str:
        """텍스트 생성 호출.

        Raises:
            ExternalServiceError: 호출 실패 또는 빈 응답 (Call failed or empty answer)
        """
        url = f"{settings.GEMINI_API_URL}/{settings.GEMINI_MODEL}:generateContent"
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            async with httpx.AsyncClient(timeout=settings.GEMINI_TIMEOUT_SECONDS) as client:
                response = await client.post(url, json=body, headers={"x-goog-api-key": settings.GEMINI_API_KEY})
                response.raise_for_status()
                data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"].strip()
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            raise ExternalServiceError("Text generation service unavailable") from exc
        if not text:
            raise ExternalServiceError("Text generation returned an empty answer")
        return text

    async def generate_justification(
        self,
        user_input: str,
        record_type: str | RecordType,
        on: date | datetime,
    ) -> tuple[str, bool]:
        """비공식 설명을 공식 사유로 변환합니다.

        Generate a professional justification.

        Args:
            user_input: 직원의 비공식 설명 (Employee's informal description)
            record_type: 기록 유형 (Record type being adjusted)
            on: 기록 일자 (Date of the record)

        Returns:
            tuple[str, bool]: (사유 문구, 생성 서비스 사용 여부)
                              (Justification text, whether it came from the generator)
        """
        if not self.is_configured:
            return fallback_justification(record_type, on), False

        prompt = _JUSTIFICATION_PROMPT.format(
            record_type=_RECORD_LABELS[_coerce_record_type(record_type)],
            date=format_br_date(on),
            user_input=user_input,
        )
        try:
            return await self._generate(prompt), True
        except ExternalServiceError as exc:
            logger.warning("Justification generation fell back to template: %s", exc.__cause__ or exc.detail)
            return fallback_justification(record_type, on), False

    async def analyze_justification(self, text: str) -> dict[str, Any]:
        """사유 문구의 감정/긴급도/분류 분석 — falls back to a neutral analysis."""
        if not self.is_configured:
            return dict(DEFAULT_ANALYSIS)

        try:
            raw = await self._generate(_ANALYSIS_PROMPT.format(text=text))
        except ExternalServiceError as exc:
            logger.warning("Justification analysis fell back to default: %s", exc.__cause__ or exc.detail)
            return dict(DEFAULT_ANALYSIS)

        # 코드 블록 제거 — strip a ```json fence if the model added one
        cleaned = raw.strip().removeprefix("```json").removeprefix("```").removesuffix("```").strip()
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError:
            return dict(DEFAULT_ANALYSIS)
        if not isinstance(parsed, dict):
            return dict(DEFAULT_ANALYSIS)
        return {key: parsed.get(key, default) for key, default in DEFAULT_ANALYSIS.items()}


# 싱글턴 인스턴스 — Singleton instance
justification_service: JustificationService = JustificationService()
