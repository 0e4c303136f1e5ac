"""Header names shared by the endpoint clients and the request pipeline."""

AUTHORIZATION_HEADER = "Authorization"
SESSION_HEADER = "GuidSessionDataRequest"
CLIENT_HEADER = "X-Refit-Client"
