from flask import Blueprint, jsonify, request, current_app
from trivia import get_bot

webhook = Blueprint('webhook', __name__)


def reply_payload(text: str) -> dict:
    """JSON envelope Slack expects back from an outgoing webhook."""
    settings = get_bot().settings
    payload = {'text': text, 'link_names': 1}
    if settings.bot_username is not None:
        payload['username'] = settings.bot_username
    if settings.bot_icon is not None:
        payload['icon_emoji'] = settings.bot_icon
    return payload


@webhook.route('/', methods=['POST'])
def handle_webhook():
    # Slack posts form fields: token, team_id, channel_id, channel_name,
    # timestamp, user_id, user_name, text, trigger_word
    params = request.form.to_dict() or (request.get_json(silent=True) or {})
    reply = ''
    try:
        current_app.logger.info(
            f"[webhook] channel={params.get('channel_id')} user={params.get('user_id')} text={params.get('text')!r}"
        )
        reply = get_bot().handle(params)
    except Exception:
        current_app.logger.exception('[webhook] command failed')
        reply = ''
    return jsonify(reply_payload(reply)), 200
