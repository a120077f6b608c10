"""
案件分析命令行脚本
读取案件描述（及可选文档），调用分析接口并输出结果

用法:
    python -m legalinsight.scripts.analyze_case --text "..." [--file notice.pdf] [--json]
    cat case.txt | python -m legalinsight.scripts.analyze_case
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from loguru import logger

from legalinsight.models.legal_schemas import CaseAnalysis
from legalinsight.services.analysis_client import AnalysisClient
from legalinsight.utils.document_utils import DocumentError, read_document_file


def format_summary(analysis: CaseAnalysis) -> str:
    """按分节输出的简要结果"""
    lines = [
        f"Analysis {analysis.id} ({analysis.timestamp.isoformat()})",
        f"Input: {analysis.inputSummary}",
        "",
        f"Primary domain:      {analysis.classification.primaryDomain}",
        f"Procedural stage:    {analysis.classification.proceduralStage}",
        f"Core section:        {analysis.legalProvisions.coreSection}",
        f"Evidence strength:   {analysis.factEvidence.evidenceStrength.value}",
        f"Correct forum:       {analysis.jurisdiction.correctForum}",
        f"Limitation status:   {analysis.jurisdiction.limitationStatus.value}",
        f"Total timeline:      {analysis.proceduralPath.totalTimeline}",
        f"Success probability: {analysis.riskOutcome.successProbability.value}",
        f"Judicial attitude:   {analysis.precedents.judicialAttitude}",
        "",
        "Strategy:",
        f"  {analysis.winningStrategy.overview}",
    ]
    if analysis.proceduralPath.steps:
        lines.append("")
        lines.append("Procedural steps:")
        for index, step in enumerate(analysis.proceduralPath.steps, start=1):
            lines.append(f"  {index}. {step.step} ({step.timeline}) {step.notes}".rstrip())
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Analyze a legal case description")
    parser.add_argument("--text", help="case description (read from stdin when omitted)")
    parser.add_argument("--file", help="supporting document (.txt, .pdf, .doc, .docx)")
    parser.add_argument("--url", help="analysis endpoint URL")
    parser.add_argument("--timeout", type=float, help="request timeout in seconds")
    parser.add_argument("--json", action="store_true", help="print the full analysis as JSON")
    return parser


async def run(args: argparse.Namespace) -> int:
    case_text = args.text if args.text is not None else sys.stdin.read()

    document_text: Optional[str] = None
    if args.file:
        try:
            document_text = read_document_file(args.file)
        except (DocumentError, OSError) as e:
            logger.error(f"文档读取失败: {e}")
            return 2

    overrides = {"on_progress": lambda label: logger.info(label)}
    if args.url:
        overrides["api_url"] = args.url
    if args.timeout:
        overrides["timeout"] = args.timeout
    client = AnalysisClient.from_config(**overrides)

    try:
        analysis = await client.analyze_case(case_text, document_text)
    except DocumentError as e:
        logger.error(str(e))
        return 2

    if analysis is None:
        print(client.state.message, file=sys.stderr)
        return 1

    if args.json:
        print(analysis.model_dump_json(indent=2))
    else:
        print(format_summary(analysis))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
