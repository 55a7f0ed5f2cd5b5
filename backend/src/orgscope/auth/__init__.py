"""Principal extraction from bearer tokens issued by the authentication provider."""
