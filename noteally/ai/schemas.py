from marshmallow import Schema, fields, validate


class ProcessPdfIn(Schema):
    pdfUrl = fields.Url(required=True, schemes={"http", "https"}, require_tld=False,
                        validate=validate.Length(max=2048))


class SummaryOut(Schema):
    summary = fields.String(required=True)
    points = fields.String(required=True)
