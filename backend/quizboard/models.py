from datetime import datetime

from flask_login import UserMixin

from quizboard import db


GAME_STATUSES = ('created', 'active', 'finished')


def _iso(value):
    return value.isoformat() if value else None


class AdminUser(UserMixin):
    """The single admin identity; there are no per-user accounts."""

    id = 'admin'

    def to_dict(self):
        return {'id': self.id, 'role': 'admin'}


class Team(db.Model):
    __tablename__ = 'team'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False, index=True)
    logo_path = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    participations = db.relationship('GameParticipant', back_populates='team', cascade='all, delete-orphan')
    scores = db.relationship('RoundScore', back_populates='team', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'logo_path': self.logo_path,
            'created_at': _iso(self.created_at),
        }


class GameTemplate(db.Model):
    __tablename__ = 'game_template'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    rounds = db.relationship(
        'TemplateRound',
        back_populates='template',
        order_by='TemplateRound.round_number',
        cascade='all, delete-orphan',
    )
    games = db.relationship('Game', back_populates='template')

    def to_dict(self, include_rounds=True):
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'created_at': _iso(self.created_at),
        }
        if include_rounds:
            data['rounds'] = [r.to_dict() for r in self.rounds]
        return data


class TemplateRound(db.Model):
    __tablename__ = 'template_round'
    __table_args__ = (
        db.UniqueConstraint('template_id', 'round_number', name='uq_template_round_number'),
    )
    id = db.Column(db.Integer, primary_key=True)
    template_id = db.Column(db.Integer, db.ForeignKey('game_template.id', ondelete='CASCADE'), nullable=False, index=True)
    round_number = db.Column(db.Integer, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    # None means the round is unbounded
    max_score = db.Column(db.Numeric(8, 1, asdecimal=False), nullable=True)

    template = db.relationship('GameTemplate', back_populates='rounds')

    def to_dict(self):
        return {
            'id': self.id,
            'template_id': self.template_id,
            'round_number': self.round_number,
            'name': self.name,
            'max_score': float(self.max_score) if self.max_score is not None else None,
        }


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    template_id = db.Column(db.Integer, db.ForeignKey('game_template.id'), nullable=False, index=True)
    status = db.Column(db.String(16), default='created', nullable=False)  # created, active, finished
    current_round = db.Column(db.Integer, default=0, nullable=False)
    event_date = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    template = db.relationship('GameTemplate', back_populates='games')
    participants = db.relationship(
        'GameParticipant',
        back_populates='game',
        order_by='GameParticipant.id',
        cascade='all, delete-orphan',
    )
    scores = db.relationship('RoundScore', back_populates='game', cascade='all, delete-orphan')

    @property
    def round_numbers(self):
        return [r.round_number for r in self.template.rounds] if self.template else []

    def to_dict(self, include_details=False):
        data = {
            'id': self.id,
            'name': self.name,
            'template_id': self.template_id,
            'status': self.status,
            'current_round': self.current_round,
            'event_date': _iso(self.event_date),
            'created_at': _iso(self.created_at),
        }
        if include_details:
            data['template'] = self.template.to_dict() if self.template else None
            data['participants'] = [p.to_dict(include_team=True) for p in self.participants]
        return data


class GameParticipant(db.Model):
    __tablename__ = 'game_participant'
    __table_args__ = (
        db.UniqueConstraint('game_id', 'team_id', name='uq_game_participant_team'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    team_id = db.Column(db.Integer, db.ForeignKey('team.id', ondelete='CASCADE'), nullable=False, index=True)
    table_number = db.Column(db.String(32), nullable=True)
    participants_count = db.Column(db.Integer, nullable=True)

    game = db.relationship('Game', back_populates='participants')
    team = db.relationship('Team', back_populates='participations')

    def to_dict(self, include_team=False):
        data = {
            'id': self.id,
            'game_id': self.game_id,
            'team_id': self.team_id,
            'table_number': self.table_number,
            'participants_count': self.participants_count,
        }
        if include_team and self.team is not None:
            data['team'] = self.team.to_dict()
        return data


class RoundScore(db.Model):
    __tablename__ = 'round_score'
    __table_args__ = (
        db.UniqueConstraint('game_id', 'team_id', 'round_number', name='uq_round_score_game_team_round'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    team_id = db.Column(db.Integer, db.ForeignKey('team.id', ondelete='CASCADE'), nullable=False, index=True)
    round_number = db.Column(db.Integer, nullable=False)
    score = db.Column(db.Numeric(8, 1, asdecimal=False), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    game = db.relationship('Game', back_populates='scores')
    team = db.relationship('Team', back_populates='scores')

    def to_dict(self):
        return {
            'id': self.id,
            'game_id': self.game_id,
            'team_id': self.team_id,
            'round_number': self.round_number,
            'score': float(self.score),
            'created_at': _iso(self.created_at),
        }
