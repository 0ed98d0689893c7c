# core/template_engine.py
"""
Confirmation email templates for form submissions

Templates are rendered with Jinja2 autoescaping so submitted values can never
inject markup into outgoing mail.
"""

import logging
from typing import Any, Dict

from jinja2 import DictLoader, Environment, StrictUndefined, select_autoescape
from jinja2.exceptions import TemplateError

logger = logging.getLogger(__name__)


_LAYOUT = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
  </head>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
      {% block content %}{% endblock %}
    </div>
  </body>
</html>
"""

TEMPLATES = {
    'layout.html': _LAYOUT,

    'contact_confirmation.html': """{% extends "layout.html" %}
{% block content %}
      <h2 style="color: #0066cc;">Thank you for contacting us!</h2>
      <p>Dear {{ name }},</p>
      <p>We have received your message and our team will get back to you shortly.</p>
      <p>Best regards,<br>{{ company_name }} Team</p>
{% endblock %}
""",

    'career_application.html': """{% extends "layout.html" %}
{% block content %}
      <h2 style="color: #0066cc;">Career Application Received</h2>
      <p>Dear {{ name }},</p>
      <p>Thank you for applying for the <strong>{{ position }}</strong> position at {{ company_name }}.</p>
      <p>Our HR team will review your application and contact you soon.</p>
      <p>Best regards,<br>{{ company_name }} HR Team</p>
{% endblock %}
""",

    'report_download.html': """{% extends "layout.html" %}
{% block content %}
      <h2 style="color: #0066cc;">Download Your Report</h2>
      <p>Thank you for your interest in our report.</p>
      <p>Click the link below to download:</p>
      <a href="{{ download_url }}"
         style="display: inline-block; padding: 12px 24px; background: #0066cc; color: white; text-decoration: none; border-radius: 4px; margin: 20px 0;">
        Download Report
      </a>
      <p>Best regards,<br>{{ company_name }} Team</p>
{% endblock %}
""",
}


class EmailTemplateEngine:
    """
    Renders kind-specific confirmation emails
    """

    REPORT_PATH = '/downloads/report.pdf'

    def __init__(self, base_url: str, company_name: str = 'CIUS'):
        """
        Args:
            base_url: Public site URL used for links inside emails
            company_name: Signature used in every template
        """
        self.base_url = base_url.rstrip('/')
        self.company_name = company_name
        self.env = Environment(
            loader=DictLoader(TEMPLATES),
            autoescape=select_autoescape(enabled_extensions=('html',), default=True),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True
        )

    @property
    def report_download_url(self) -> str:
        return f"{self.base_url}{self.REPORT_PATH}"

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render an email body

        Args:
            template_name: One of the registered template names
            context: Validated submission fields plus the record id

        Returns:
            Rendered HTML

        Raises:
            TemplateError: If the template is unknown or a variable is missing
        """
        variables = {
            'company_name': self.company_name,
            'download_url': self.report_download_url,
        }
        variables.update(context)

        try:
            return self.env.get_template(template_name).render(**variables)
        except TemplateError as e:
            logger.error(f"Failed to render {template_name}: {e}")
            raise
