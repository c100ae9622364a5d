"""
Bucket lifecycle rules, used to have the store expire (delete) objects under a folder after a number of days.

Only a single rule is supported, submitting a rule replaces any lifecycle configuration the bucket already had.
"""

from dataclasses import dataclass
from xml.sax.saxutils import escape

from easy_s3.constants import S3_SEPARATOR


def as_folder_prefix(folder_path: str) -> str:
    """Make sure a folder path ends with the separator, so the rule does not also match 'logs-old/' for 'logs'."""
    if not folder_path.endswith(S3_SEPARATOR):
        folder_path += S3_SEPARATOR
    return folder_path


@dataclass(frozen=True)
class LifecycleRule:
    """
    A rule expiring all objects under 'prefix' after 'days_to_expiry' days.

    The rule_id must be unique in the bucket, this is not checked here,
    a clash is reported by the store itself.
    """

    rule_id: str
    prefix: str
    days_to_expiry: int

    @classmethod
    def for_folder(cls, rule_id: str, folder_path: str, days_to_expiry: int) -> "LifecycleRule":
        if days_to_expiry < 1:
            raise ValueError(f"days_to_expiry must be a positive number of days, got: {days_to_expiry}")
        return cls(rule_id=rule_id, prefix=as_folder_prefix(folder_path), days_to_expiry=days_to_expiry)

    def to_xml(self) -> str:
        """The rule as the LifecycleConfiguration XML document the S3 API receives."""
        return (
            "<LifecycleConfiguration><Rule>"
            f"<ID>{escape(self.rule_id)}</ID>"
            f"<Prefix>{escape(self.prefix)}</Prefix>"
            "<Status>Enabled</Status>"
            f"<Expiration><Days>{self.days_to_expiry}</Days></Expiration>"
            "</Rule></LifecycleConfiguration>"
        )

    def to_boto3(self) -> dict:
        """The rule in the shape boto3's put_bucket_lifecycle_configuration expects."""
        return {
            "Rules": [
                {
                    "ID": self.rule_id,
                    "Filter": {"Prefix": self.prefix},
                    "Status": "Enabled",
                    "Expiration": {"Days": self.days_to_expiry},
                }
            ]
        }
