"""JSON report generator for discovery exchanges.

Generates structured JSON reports from exchange results.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..message.request import Request
from ..message.response import Response
from ..ssdp.description import DeviceDescription


class JsonReporter:
    """Generates JSON reports from exchange results."""

    def generate(
        self,
        name: str,
        request: Request,
        responses: list[Response],
        timeout: float,
        num_sends: int,
        duration_ms: int = 0,
        descriptions: Optional[dict[str, DeviceDescription]] = None,
        error: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate a JSON report from an exchange.

        Args:
            name: Probe or command name.
            request: Request that was sent.
            responses: Responses collected, in arrival order.
            timeout: Collection window in seconds.
            num_sends: Number of send rounds.
            duration_ms: Exchange duration in milliseconds.
            descriptions: Device descriptions keyed by location.
            error: Error message if the exchange failed.

        Returns:
            Report dictionary ready for JSON serialization.
        """
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "name": name,
            "status": "failed" if error else "completed",
            "request": {
                "line": request.request_line,
                "host": request.host,
                "headers": request.headers.to_dict(),
            },
            "exchange": {
                "timeout": timeout,
                "num_sends": num_sends,
                "duration_ms": duration_ms,
            },
            "summary": {
                "responses": len(responses),
                "respondents": len({r.remote_addr for r in responses if r.remote_addr}),
            },
            "responses": [r.to_dict() for r in responses],
            "descriptions": [d.to_dict() for d in (descriptions or {}).values()],
            "error": error,
        }

    def save(self, report: dict[str, Any], path: Path) -> Path:
        """Save report to a JSON file.

        Args:
            report: Report dictionary.
            path: Output file path.

        Returns:
            Path to the saved file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

        return path

    def generate_cli_output(
        self,
        report: dict[str, Any],
        command: str,
        report_path: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate the CLI's JSON envelope.

        {
            "success": bool,
            "command": "search" | "probe",
            "data": { ... },
            "message": str
        }

        Args:
            report: Exchange report dictionary.
            command: CLI command that produced the report.
            report_path: Path where report was saved.

        Returns:
            JSON envelope dictionary.
        """
        summary = report["summary"]
        success = report["error"] is None

        data: dict[str, Any] = {
            "name": report["name"],
            "request": report["request"]["line"],
            "host": report["request"]["host"],
            "responses": report["responses"],
            "duration_ms": report["exchange"]["duration_ms"],
        }
        if report["descriptions"]:
            data["descriptions"] = report["descriptions"]
        if report_path:
            data["report_path"] = report_path

        if not success:
            message = f"Exchange failed: {report['error']}"
        else:
            message = (
                f"{summary['responses']} response(s) from "
                f"{summary['respondents']} respondent(s)"
            )

        return {
            "success": success,
            "command": command,
            "data": data,
            "message": message,
        }
