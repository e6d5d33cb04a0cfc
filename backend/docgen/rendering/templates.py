from __future__ import annotations

import html
from datetime import datetime, timezone
from typing import Optional


def _stamp(at: Optional[datetime]) -> str:
    at = at or datetime.now(timezone.utc)
    return at.strftime("%Y-%m-%d %H:%M:%S")


def loading_html(prompt: str = "", started_at: Optional[datetime] = None) -> str:
    """Placeholder shown while a job is pending or processing."""
    return f"""
    <div>
      <h1>Processing Your Request</h1>
      <div style="margin: 20px 0; padding: 15px; border-left: 4px solid #3498db; background-color: #f8f9fa;">
        <p>We're working on generating your document from the prompt:</p>
        <p><em>"{html.escape(prompt)}"</em></p>
      </div>

      <div style="margin: 20px 0; text-align: center;">
        <div style="display: inline-block; width: 50px; height: 50px; border: 5px solid #f3f3f3;
                    border-top: 5px solid #3498db; border-radius: 50%; animation: spin 1s linear infinite;"></div>
        <p>This may take up to 2 minutes to complete...</p>
        <style>
          @keyframes spin {{
            0% {{ transform: rotate(0deg); }}
            100% {{ transform: rotate(360deg); }}
          }}
        </style>
      </div>

      <p>The system is working on your document. Please wait while we process your request.</p>
      <hr>
      <p>Started at: {_stamp(started_at)}</p>
    </div>
    """


def fallback_html(prompt: str = "", error_message: str = "", generated_at: Optional[datetime] = None) -> str:
    """Document rendered in place of a generation result that never arrived."""
    error_block = f"<p><strong>Error:</strong> {html.escape(error_message)}</p>" if error_message else ""
    return f"""
    <div>
      <h1>Sample Document</h1>
      <p>This is a fallback document generated because we couldn't process your request properly.</p>
      {error_block}
      <p>Your prompt was: "{html.escape(prompt)}"</p>
      <hr>
      <p>Generated at: {_stamp(generated_at)}</p>
    </div>
    """


def timeout_html(prompt: str = "", error_message: str = "", at: Optional[datetime] = None) -> str:
    """Client-side document for a poll loop that gave up or lost the server."""
    return f"""
    <div>
      <h1>Processing Timeout</h1>
      <p>Your document request took too long to process.</p>
      <p>Your prompt was: "{html.escape(prompt)}"</p>
      <p>Error: {html.escape(error_message or "Unknown error")}</p>
      <hr>
      <p>Time: {_stamp(at)}</p>
    </div>
    """
