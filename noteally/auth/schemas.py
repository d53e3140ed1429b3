from marshmallow import Schema, fields, validate, pre_load


class _Credentials(Schema):
    email = fields.Email(required=True, validate=validate.Length(max=320))
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        # même forme que users.email; display_name sans blancs autour
        if not isinstance(data, dict):
            return data
        return {k: v.strip().lower() if k == "email" and isinstance(v, str)
                else v.strip() if k == "display_name" and isinstance(v, str)
                else v
                for k, v in data.items()}


class RegisterIn(_Credentials):
    # bcrypt ignore tout au-delà de 72 octets
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=8, max=72))
    display_name = fields.String(load_default=None, validate=validate.Length(min=1, max=120))


class LoginIn(_Credentials):
    pass


class TokenPairOut(Schema):
    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)


class MeOut(Schema):
    id = fields.UUID(required=True)
    email = fields.Email(required=True)
    display_name = fields.String(allow_none=True)
    is_active = fields.Boolean(required=True)
    notes_count = fields.Function(lambda user: len(user.notes))
    created_at = fields.DateTime(required=True)
