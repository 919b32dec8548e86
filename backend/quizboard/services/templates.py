from typing import List

from flask import current_app

from quizboard import db
from quizboard.errors import BusinessRuleError, NotFoundError
from quizboard.models import Game, GameTemplate, TemplateRound


def _build_rounds(rounds) -> List[TemplateRound]:
    return [
        TemplateRound(round_number=r.round_number, name=r.name, max_score=r.max_score)
        for r in sorted(rounds, key=lambda r: r.round_number)
    ]


def list_templates() -> List[GameTemplate]:
    return GameTemplate.query.order_by(GameTemplate.created_at.desc(), GameTemplate.id.desc()).all()


def get_template(template_id: int) -> GameTemplate:
    template = db.session.get(GameTemplate, template_id)
    if not template:
        raise NotFoundError('Template not found')
    return template


def create_template(request) -> GameTemplate:
    template = GameTemplate(name=request.name, description=request.description or None)
    template.rounds = _build_rounds(request.rounds)
    db.session.add(template)
    db.session.commit()
    current_app.logger.info(f"[template-create] template={template.id} rounds={len(template.rounds)}")
    return template


def update_template(template_id: int, request) -> GameTemplate:
    template = get_template(template_id)
    if request.name is not None:
        template.name = request.name
    if request.description is not None:
        template.description = request.description or None
    if request.rounds is not None:
        # Replace the whole round list; flush deletions before the new
        # rows reuse the same round numbers.
        template.rounds = []
        db.session.flush()
        template.rounds = _build_rounds(request.rounds)
    db.session.commit()
    current_app.logger.info(f"[template-update] template={template.id}")
    return template


def delete_template(template_id: int) -> None:
    template = get_template(template_id)
    in_use = Game.query.filter_by(template_id=template.id).count()
    if in_use:
        raise BusinessRuleError(
            f'Cannot delete template: it is used in {in_use} game(s)',
            details={'field': 'template_id', 'value': in_use},
        )
    db.session.delete(template)
    db.session.commit()
    current_app.logger.info(f"[template-delete] template={template_id}")
