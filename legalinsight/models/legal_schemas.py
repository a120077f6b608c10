"""
Legal Case Analysis Data Models
案件分析相关的数据模型
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class EvidenceStrength(str, Enum):
    """证据强度"""
    WEAK = "Weak"
    MODERATE = "Moderate"
    STRONG = "Strong"


class LimitationStatus(str, Enum):
    """诉讼时效状态"""
    SAFE = "Safe"
    BORDERLINE = "Borderline"
    TIME_BARRED = "Time-barred"


class SuccessProbability(str, Enum):
    """胜诉概率"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# ==================== 分析结果各部分 ====================

class Classification(BaseModel):
    """案件分类"""
    primaryDomain: str = Field(..., description="主要法律领域")
    secondaryDomains: List[str] = Field(..., description="次要法律领域")
    proceduralStage: str = Field(..., description="当前程序阶段")
    complexityScore: float = Field(..., description="复杂度 (0-1)")
    confidenceScore: float = Field(..., description="置信度 (0-1)")


class LegalProvisions(BaseModel):
    """适用法条"""
    coreSection: str
    applicableSections: List[str]
    misusedSections: List[str]
    constitutionalAngles: List[str]


class FactEvidence(BaseModel):
    """事实与证据"""
    keyFacts: List[str]
    evidenceStrength: EvidenceStrength
    courtRequirements: List[str]
    gaps: List[str]


class Jurisdiction(BaseModel):
    """管辖与诉讼时效"""
    correctForum: str
    alternativeForums: List[str]
    limitationStatus: LimitationStatus
    limitationDetails: str


class ProceduralStep(BaseModel):
    step: str = ""
    timeline: str = ""
    notes: str = ""


class ProceduralPath(BaseModel):
    """程序路径"""
    steps: List[ProceduralStep]
    totalTimeline: str
    urgentActions: List[str]


class RiskOutcome(BaseModel):
    """风险与结果"""
    successProbability: SuccessProbability
    riskFactors: List[str]
    tacticalConsiderations: List[str]
    strengthFactors: List[str]


class RelevantCase(BaseModel):
    name: str = ""
    citation: str = ""
    relevance: str = ""


class Precedents(BaseModel):
    """判例与司法态度"""
    settledPrinciples: List[str]
    relevantCases: List[RelevantCase]
    judicialAttitude: str


class KeyArgument(BaseModel):
    argument: str = ""
    howToPresent: str = ""
    whyItWorks: str = ""


class PreparedQuestion(BaseModel):
    question: str = ""
    suggestedAnswer: str = ""


class WinningStrategy(BaseModel):
    """胜诉策略"""
    overview: str
    keyArguments: List[KeyArgument]
    exactWordsToUse: List[str]
    thingsToAvoidSaying: List[str]
    courtBehaviorTips: List[str]
    documentsToPrepare: List[str]
    questionsToPrepareFor: List[PreparedQuestion]
    openingStatement: str
    closingStatement: str


class CaseAnalysis(BaseModel):
    """完整的案件分析结果（所有字段必定存在）"""
    id: str = Field(..., description="分析记录ID")
    timestamp: datetime = Field(..., description="生成时间")
    inputSummary: str = Field(..., description="输入摘要（截断）")
    classification: Classification
    legalProvisions: LegalProvisions
    factEvidence: FactEvidence
    jurisdiction: Jurisdiction
    proceduralPath: ProceduralPath
    riskOutcome: RiskOutcome
    precedents: Precedents
    winningStrategy: WinningStrategy
    rawAnalysis: str = Field(..., description="模型原始输出")

    model_config = {"frozen": True}


class HistoryItem(BaseModel):
    """历史记录条目（冗余摘要字段便于列表展示）"""
    id: str
    timestamp: datetime
    inputSummary: str
    primaryDomain: str
    successProbability: SuccessProbability
    analysis: CaseAnalysis

    model_config = {"frozen": True}

    @classmethod
    def from_analysis(cls, analysis: CaseAnalysis) -> "HistoryItem":
        return cls(
            id=analysis.id,
            timestamp=analysis.timestamp,
            inputSummary=analysis.inputSummary,
            primaryDomain=analysis.classification.primaryDomain,
            successProbability=analysis.riskOutcome.successProbability,
            analysis=analysis,
        )


# ==================== 默认值表 ====================

# 结构类字段：列表元素必须是对象，缺失的子字段补空字符串
LIST_ITEM_MODELS: Dict[str, Dict[str, type]] = {
    "proceduralPath": {"steps": ProceduralStep},
    "precedents": {"relevantCases": RelevantCase},
    "winningStrategy": {
        "keyArguments": KeyArgument,
        "questionsToPrepareFor": PreparedQuestion,
    },
}

# 枚举字段：取值不在枚举中时回退到默认值
ENUM_FIELDS: Dict[str, Dict[str, type]] = {
    "factEvidence": {"evidenceStrength": EvidenceStrength},
    "jurisdiction": {"limitationStatus": LimitationStatus},
    "riskOutcome": {"successProbability": SuccessProbability},
}

ANALYSIS_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "classification": {
        "primaryDomain": "General Legal Matter",
        "secondaryDomains": [],
        "proceduralStage": "Pre-litigation",
        "complexityScore": 0.5,
        "confidenceScore": 0.7,
    },
    "legalProvisions": {
        "coreSection": "To be determined based on specific facts",
        "applicableSections": [],
        "misusedSections": [],
        "constitutionalAngles": [],
    },
    "factEvidence": {
        "keyFacts": ["Facts to be analyzed from provided documents"],
        "evidenceStrength": EvidenceStrength.MODERATE.value,
        "courtRequirements": [],
        "gaps": [],
    },
    "jurisdiction": {
        "correctForum": "To be determined",
        "alternativeForums": [],
        "limitationStatus": LimitationStatus.SAFE.value,
        "limitationDetails": "",
    },
    "proceduralPath": {
        "steps": [{"step": "Initial consultation", "timeline": "1 week", "notes": "Gather all documents"}],
        "totalTimeline": "To be determined",
        "urgentActions": [],
    },
    "riskOutcome": {
        "successProbability": SuccessProbability.MEDIUM.value,
        "riskFactors": [],
        "tacticalConsiderations": [],
        "strengthFactors": [],
    },
    "precedents": {
        "settledPrinciples": [],
        "relevantCases": [],
        "judicialAttitude": "Neutral",
    },
    "winningStrategy": {
        "overview": "Strategy to be determined based on case details.",
        "keyArguments": [],
        "exactWordsToUse": [],
        "thingsToAvoidSaying": [],
        "courtBehaviorTips": [],
        "documentsToPrepare": [],
        "questionsToPrepareFor": [],
        "openingStatement": "",
        "closingStatement": "",
    },
}


# ==================== 接口请求 ====================

class AnalyzeCaseRequest(BaseModel):
    """分析请求"""
    caseText: Optional[Any] = Field(None, description="案件描述文本")

