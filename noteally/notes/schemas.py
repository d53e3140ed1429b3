from marshmallow import Schema, fields, validate, pre_load


class NoteIn(Schema):
    """Champs texte du formulaire d'upload (le PDF arrive dans `file`)."""
    title = fields.String(required=True, validate=validate.Length(min=1, max=200))
    subject = fields.String(required=True, validate=validate.Length(min=1, max=100))
    summarize = fields.Boolean(load_default=False)

    @pre_load
    def strip_strings(self, data, **kwargs):
        return {k: v.strip() if isinstance(v, str) else v for k, v in data.items()}


class NoteOut(Schema):
    id = fields.UUID(required=True)
    title = fields.String(required=True)
    subject = fields.String(required=True)
    file_url = fields.String(required=True)
    owner_id = fields.UUID(required=True)
    owner_email = fields.String(allow_none=True)
    likes = fields.Integer(required=True)
    views = fields.Integer(required=True)
    liked_by = fields.List(fields.String(), required=True)
    summary = fields.String(allow_none=True)
    points = fields.String(allow_none=True)
    summary_status = fields.String(required=True)
    summary_error = fields.String(allow_none=True)
    summary_started_at = fields.DateTime(allow_none=True)
    created_at = fields.DateTime(required=True)


class DailyCount(Schema):
    day = fields.Date(required=True)
    count = fields.Integer(required=True)


class StatsOut(Schema):
    notes = fields.Integer(required=True)
    total_likes = fields.Integer(required=True)
    total_views = fields.Integer(required=True)
    uploads_last_7_days = fields.List(fields.Nested(DailyCount), required=True)
