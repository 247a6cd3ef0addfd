"""
Claude API Client for the analysis layer.
Turns an extraction record into a marketing analysis (JSON).

The prompt carries only what was extracted from the page; missing fields
are passed as empty so the model is not invited to fill them from memory.
"""
import json
import re
from typing import Any, Dict, Optional, Tuple

import anthropic

from lp_analyzer.config import config
from lp_analyzer.errors import EnrichmentError
from lp_analyzer.models.media_catalog import ACTION_REASONS, media_catalog_for_prompt
from lp_analyzer.models.record import ExtractionResult
from lp_analyzer.utils.logger import LayerLogger


SYSTEM_PROMPT = """あなたはマーケティング戦略の専門家です。
与えられた商品情報だけを根拠に分析し、指定されたJSONオブジェクトを1つだけ出力してください。
JSON以外の文章は出力しないでください。"""

OUTPUT_FORMAT = """{
  "productInfo": {"productName": "", "category": "", "sizeCapacity": "", "features": [], "effects": [], "rtb": "", "authority": ""},
  "pricing": {"regularPrice": "", "specialPrice": "", "campaign": "", "releaseDate": "", "salesChannel": ""},
  "demographics": {"ageRange": "", "gender": "", "otherCharacteristics": ""},
  "valueProposition": {"functionalValue": [], "emotionalValue": ""},
  "marketAnalysis": {"marketDefinition": "", "marketCategory": "", "marketSize": "", "strategyTarget": "", "coreTarget": ""},
  "persona": {
    "profile": {"age": "", "gender": "", "location": "", "occupation": "", "income": "", "familyStructure": "", "interests": "", "mediaUsage": ""},
    "journey": {"situation": "", "sensory": "", "instinct": "", "perception": "", "emotion": "", "desire": "", "demand": ""}
  },
  "classification": {"marketType": "", "actionReason": "", "reasoning": ""},
  "recommendations": {
    "media": [{"mediaId": "", "mediaName": "", "target": "", "method": "", "reason": ""}],
    "creative": [{"mediaName": "", "idea": "", "keyMessage": "", "visualStyle": ""}]
  }
}"""

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.M)


def parse_json_payload(text: str) -> Dict[str, Any]:
    """
    Parse the model's reply into a dict.

    Tolerates code fences and prose around a single JSON object.

    Raises:
        EnrichmentError: if no JSON object can be recovered
    """
    cleaned = _CODE_FENCE.sub("", text.strip()).strip()
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError:
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            raise EnrichmentError("Analysis reply contains no JSON object")
        try:
            payload = json.loads(cleaned[start:end + 1])
        except json.JSONDecodeError as e:
            raise EnrichmentError(f"Analysis reply is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise EnrichmentError("Analysis reply is not a JSON object")
    return payload


class ClaudeClient:
    """
    Claude API client for product analysis.

    Every call returns (payload, debug_info); debug_info always carries the
    prompt and model so a failed analysis can still be inspected.
    """

    MAX_TOKENS = 4000
    TEMPERATURE = 0.3

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.logger = LayerLogger("claude_client")
        self.model = model or config.CLAUDE_MODEL
        api_key = api_key or config.CLAUDE_API_KEY

        if not api_key:
            self.logger.log_action("init", "skipped", reason="CLAUDE_API_KEY not configured")
            self.client = None
        else:
            self.client = anthropic.AsyncAnthropic(api_key=api_key)
            self.logger.log_action("init", "completed", model=self.model)

    def is_available(self) -> bool:
        """Check if Claude client is properly configured."""
        return self.client is not None

    def build_prompt(self, record: ExtractionResult) -> str:
        features = json.dumps(record.features, ensure_ascii=False)
        effects = json.dumps(record.effects, ensure_ascii=False)
        authority = json.dumps(record.authority, ensure_ascii=False)
        reasons = "\n".join(f"- {r.market_type}：{r.label}" for r in ACTION_REASONS)
        media = json.dumps(media_catalog_for_prompt(), ensure_ascii=False)

        return f"""以下の商品情報を分析し、指定されたフォーマットのJSONで出力してください。

## 商品情報
- URL: {record.url}
- タイトル: {record.title}
- 商品名: {record.product_name}
- 説明: {record.description}
- 価格: {record.price}
- カテゴリー: {record.category}
- 特徴: {features}
- 効果: {effects}
- 権威性: {authority}
- キャンペーン: {record.campaign}
- 保証: {record.guarantee}

## 分析項目
1. 商品・製品情報（機能、効果、RTB、権威性）
2. 価格・販売情報
3. デモグラフィック（年齢層、性別比率、その他特性）
4. 提供価値（機能価値、情緒価値）
5. 市場分析（市場定義、市場規模、戦略ターゲット、コアターゲット）
6. N1ペルソナとカスタマージャーニー
7. 市場タイプ分類（ニッチ or マス向け）と根拠
8. 行動理由分類（以下から1つ選択）
{reasons}
9. 推奨広告媒体（次の媒体データベースから分類に合うIDを3つ選択）
{media}
10. 選択した媒体ごとのクリエイティブ提案

## 出力形式
{OUTPUT_FORMAT}"""

    async def analyze_product(
        self, record: ExtractionResult
    ) -> Tuple[Optional[Dict[str, Any]], Dict[str, Any]]:
        """
        Ask Claude for a marketing analysis of one record.

        Returns:
            (payload or None, debug_info)
        """
        prompt = self.build_prompt(record)
        debug_info: Dict[str, Any] = {"prompt": prompt, "model": self.model}

        if not self.client:
            debug_info["error"] = "not_configured"
            return None, debug_info

        self.logger.log_action("analyze_product", "started", url=record.url, model=self.model)
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.MAX_TOKENS,
                temperature=self.TEMPERATURE,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            self.logger.log_error(f"Claude API error: {e}", error_type="api_error", url=record.url)
            debug_info["error"] = str(e)
            return None, debug_info

        debug_info["tokens"] = {
            "input": response.usage.input_tokens,
            "output": response.usage.output_tokens,
        }
        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        debug_info["raw_response"] = text

        try:
            payload = parse_json_payload(text)
        except EnrichmentError as e:
            self.logger.log_error(str(e), error_type="invalid_response", url=record.url)
            debug_info["error"] = str(e)
            return None, debug_info

        self.logger.log_action(
            "analyze_product",
            "success",
            url=record.url,
            tokens=debug_info["tokens"]["input"] + debug_info["tokens"]["output"],
        )
        return payload, debug_info
