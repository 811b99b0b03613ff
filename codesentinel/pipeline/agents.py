"""Analysis agents: one engine call plus normalization per analysis."""

import re
import time
from typing import List, Optional

from ..config import ReviewConfig, DEFAULT_CONFIG
from ..models import AnalysisResult, Issue, IssueKind, IssueSource, Severity
from ..tools import AnalysisEngine
from ..utils import elapsed_ms, get_logger, record_metric
from .normalizer import normalize


PRIMARY_SYSTEM_PROMPT = """You are a senior software engineer performing code review.
Focus on:
1. **Bugs & Logic Errors**: Identify incorrect implementations
2. **Performance Issues**: Detect inefficient algorithms, memory leaks
3. **Best Practices**: Check for code style, naming conventions
4. **Maintainability**: Assess readability and documentation

Return JSON format:
{
  "issues": [
    {
      "type": "bug|performance|style",
      "severity": "critical|high|medium|low",
      "line": 5,
      "title": "Short description",
      "description": "Detailed explanation",
      "suggestion": "How to fix"
    }
  ],
  "confidence": 90,
  "summary": "Overall assessment"
}"""


SECURITY_SYSTEM_PROMPT = """You are a security expert specializing in application security.
Scan this code for OWASP Top 10 vulnerabilities:

1. SQL Injection
2. Cross-Site Scripting (XSS)
3. Broken Authentication
4. Sensitive Data Exposure (hardcoded secrets)
5. XML External Entities (XXE)
6. Broken Access Control
7. Security Misconfiguration
8. CSRF
9. Insecure Deserialization
10. Known Vulnerable Dependencies

Also check for:
- Exposed API keys, tokens, passwords
- Unsafe cryptography
- Command injection
- Path traversal

Return JSON format:
{
  "issues": [
    {
      "type": "security",
      "severity": "critical|high|medium|low",
      "line": 10,
      "title": "SQL Injection|XSS|Secret Exposure|etc",
      "description": "Detailed explanation and how it can be exploited",
      "suggestion": "How to fix it"
    }
  ],
  "confidence": 95,
  "summary": "Overall security assessment"
}"""


class AnalysisAgent:
    """
    Base agent: prompt the engine once and normalize the reply.

    Engine failures are logged and re-raised; callers decide whether to
    isolate them.
    """

    name = "AnalysisAgent"
    source = IssueSource.PRIMARY
    system_prompt = ""

    def __init__(self, engine: AnalysisEngine, config: Optional[ReviewConfig] = None):
        self.engine = engine
        self.config = config or DEFAULT_CONFIG
        self.logger = get_logger(f"codesentinel.agents.{self.name}")

    def build_prompt(self, code: str, language: str) -> str:
        return f"Review this {language} code:\n```{language}\n{code}\n```"

    async def analyze(self, code: str, language: str) -> AnalysisResult:
        """
        Analyze code with one engine call.

        Args:
            code: Source text
            language: Language id used in the prompt

        Returns:
            Normalized AnalysisResult with issues tagged by this agent
        """
        start = time.perf_counter()
        self.logger.debug(f"{self.name} analyzing {language} code...")

        try:
            response = await self.engine.generate(
                self.build_prompt(code, language),
                system_prompt=self.system_prompt,
                max_tokens=self.config.max_tokens,
            )
        except Exception as e:
            self.logger.error(f"{self.name} analysis failed: {e}")
            raise

        result = self.postprocess(normalize(response, source=self.source), code)

        record_metric(
            f"{self.name}.analyze",
            elapsed_ms(start),
            issues_found=len(result.issues),
            confidence=result.confidence,
        )
        return result

    def postprocess(self, result: AnalysisResult, code: str) -> AnalysisResult:
        return result


class PrimaryAgent(AnalysisAgent):
    """General-purpose review: bugs, performance, style, maintainability."""

    name = "PrimaryAgent"
    source = IssueSource.PRIMARY
    system_prompt = PRIMARY_SYSTEM_PROMPT


# (pattern, title, severity, fix)
QUICK_SCAN_PATTERNS = [
    (
        re.compile(r"SELECT.*FROM.*WHERE.*['\"].*\+", re.IGNORECASE),
        "SQL Injection",
        Severity.CRITICAL,
        "Use parameterized queries or prepared statements",
    ),
    (
        re.compile(r"(innerHTML|outerHTML|document\.write)\s*=", re.IGNORECASE),
        "Cross-Site Scripting (XSS)",
        Severity.HIGH,
        "Use textContent instead of innerHTML, sanitize user input",
    ),
    (
        re.compile(r"(api[_-]?key|password|secret|token)\s*=\s*['\"]", re.IGNORECASE),
        "Hardcoded Secret",
        Severity.CRITICAL,
        "Use environment variables or secret management service",
    ),
    (
        re.compile(r"\beval\s*\(", re.IGNORECASE),
        "Unsafe eval() Usage",
        Severity.HIGH,
        "Avoid eval(), use safer alternatives",
    ),
    (
        re.compile(r"\b(exec|spawn|system)\s*\(", re.IGNORECASE),
        "Command Injection",
        Severity.CRITICAL,
        "Validate and sanitize all user inputs",
    ),
]


def quick_scan(code: str) -> List[Issue]:
    """Regex pre-scan for common vulnerability patterns, one issue per hit."""
    issues = []
    for index, line in enumerate(code.split("\n")):
        for pattern, title, severity, fix in QUICK_SCAN_PATTERNS:
            if pattern.search(line):
                issues.append(Issue(
                    title=title,
                    kind=IssueKind.SECURITY,
                    severity=severity,
                    line=index + 1,
                    description=f"Potential {title} detected (pattern-based detection)",
                    suggestion=fix,
                    source=IssueSource.SECURITY,
                ))
    return issues


class SecurityAgent(AnalysisAgent):
    """Domain-specific review: OWASP-style vulnerability scan."""

    name = "SecurityAgent"
    source = IssueSource.SECURITY
    system_prompt = SECURITY_SYSTEM_PROMPT

    def build_prompt(self, code: str, language: str) -> str:
        return f"Scan this {language} code for security vulnerabilities:\n```{language}\n{code}\n```"

    async def analyze(self, code: str, language: str) -> AnalysisResult:
        if not self.config.security_agent_enabled:
            self.logger.debug("Security Agent disabled, skipping...")
            return AnalysisResult(issues=(), confidence=100, summary="Security scan disabled")
        return await super().analyze(code, language)

    def postprocess(self, result: AnalysisResult, code: str) -> AnalysisResult:
        if not self.config.quick_scan_enabled:
            return result

        pattern_issues = quick_scan(code)
        if not pattern_issues:
            return result

        issues = tuple(pattern_issues) + result.issues
        return AnalysisResult(
            issues=issues,
            confidence=result.confidence,
            summary=f"Found {len(issues)} security issue(s)",
        )
