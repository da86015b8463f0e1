"""HTML bodies for contribution notifications."""

from html import escape

_LAYOUT = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; background-color: #f9f9f9; border-radius: 10px;">
  <h1 style="color: #000B41; text-align: center; margin-bottom: 30px; font-size: 28px;">{heading}</h1>
  <div style="background-color: white; padding: 20px; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1);">
    {body}
    <div style="text-align: center;">
      <a href="{link}"
         style="display: inline-block; padding: 12px 24px; background-color: #002147; color: white; text-decoration: none; border-radius: 5px; font-weight: bold; width: 100%; text-align: center; box-sizing: border-box;">
        View Submission
      </a>
    </div>
  </div>
</div>
"""

_PARAGRAPH = '<p style="color: #4A5568; line-height: 1.6; margin-bottom: 20px;">{text}</p>'


def contribution_link(frontend_url: str, contribution_id: str) -> str:
    return f"{frontend_url.rstrip('/')}/contributions/{contribution_id}"


def new_contribution_email(
    frontend_url: str,
    contribution_id: str,
    title: str,
    student_name: str,
    coordinator_name: str,
    created_date: str,
) -> str:
    body = _PARAGRAPH.format(text=f"Dear {escape(coordinator_name)},") + _PARAGRAPH.format(
        text=(
            f'A new article titled "{escape(title)}" has been submitted by '
            f"{escape(student_name)} on {escape(created_date)} for your review."
        )
    )
    return _LAYOUT.format(
        heading="New Contribution Submitted",
        body=body,
        link=contribution_link(frontend_url, contribution_id),
    )


def new_comment_email(
    frontend_url: str,
    contribution_id: str,
    title: str,
    recipient_name: str,
    author_name: str,
) -> str:
    body = _PARAGRAPH.format(text=f"Dear {escape(recipient_name)},") + _PARAGRAPH.format(
        text=(
            f'The article titled "{escape(title)}" has received a new comment '
            f"from {escape(author_name)}."
        )
    )
    return _LAYOUT.format(
        heading="Feedback on Your Article Submission",
        body=body,
        link=contribution_link(frontend_url, contribution_id),
    )


def status_changed_email(
    frontend_url: str,
    contribution_id: str,
    title: str,
    student_name: str,
    status: str,
) -> str:
    if status == "selected":
        outcome = (
            f'congratulations! Your contribution "{escape(title)}" has been '
            "selected for the faculty's magazine."
        )
    else:
        outcome = (
            f'sorry, your contribution "{escape(title)}" has been rejected for '
            "the faculty's magazine."
        )
    body = _PARAGRAPH.format(text=f"Dear {escape(student_name)}, {outcome}")
    return _LAYOUT.format(
        heading="Contribution Status Updated",
        body=body,
        link=contribution_link(frontend_url, contribution_id),
    )
