from django.db import connections, models, transaction
from django.db.models import Count, F, Max


class CountryManager(models.Manager):
    """Every read and write of the countries table goes through here."""

    def list_all(self):
        return self.get_queryset().order_by("id")

    def filtered(self, region=None, currency=None, sort=None):
        """
        region/currency are case-insensitive equality filters.
        sort is gdp_asc or gdp_desc; null GDPs go last either way.
        Anything else keeps storage order.
        """
        qs = self.list_all()
        if region:
            qs = qs.filter(region__iexact=region)
        if currency:
            qs = qs.filter(currency_code__iexact=currency)

        if sort == "gdp_asc":
            qs = qs.order_by(F("estimated_gdp").asc(nulls_last=True), "id")
        elif sort == "gdp_desc":
            qs = qs.order_by(F("estimated_gdp").desc(nulls_last=True), "id")
        return qs

    def find_by_name(self, name):
        return self.list_all().filter(name__iexact=name).first()

    def delete_by_name(self, name):
        deleted, _ = self.get_queryset().filter(name__iexact=name).delete()
        return deleted

    def insert_one(self, **fields):
        return self.create(**fields)

    def truncate(self):
        deleted, _ = self.get_queryset().delete()
        return deleted

    def replace_all(self, rows):
        # readers see either the old table or the new one
        with transaction.atomic(using=self.db):
            self.get_queryset().delete()
            return self.bulk_create(rows)

    def top_by_gdp(self, limit=5):
        return self.get_queryset().order_by(F("estimated_gdp").desc(nulls_last=True), "id")[:limit]

    def status_summary(self):
        stats = self.get_queryset().aggregate(
            total_countries=Count("id"),
            last_refreshed_at=Max("last_refreshed_at"),
        )
        return {
            "total_countries": stats["total_countries"],
            "last_refreshed_at": stats["last_refreshed_at"],
        }

    def create_schema(self):
        with connections[self.db].schema_editor() as editor:
            editor.create_model(self.model)

    def drop_schema(self):
        connection = connections[self.db]
        if self.model._meta.db_table not in connection.introspection.table_names():
            return
        with connection.schema_editor() as editor:
            editor.delete_model(self.model)


class Country(models.Model):
    # id — auto-generated
    name = models.CharField(max_length=200, db_index=True)
    capital = models.CharField(max_length=200, null=True, blank=True)
    region = models.CharField(max_length=100, null=True, blank=True)
    population = models.BigIntegerField()
    # currency_code — first currency of the upstream record, null when it has none
    currency_code = models.CharField(max_length=10, null=True, blank=True)
    # exchange_rate / estimated_gdp — null together when there is no usable rate
    exchange_rate = models.FloatField(null=True, blank=True)
    estimated_gdp = models.BigIntegerField(null=True, blank=True)
    flag_url = models.URLField(max_length=500, null=True, blank=True)
    last_refreshed_at = models.DateTimeField(auto_now=True)

    objects = CountryManager()

    class Meta:
        db_table = "countries"
        verbose_name_plural = "countries"

    def __str__(self):
        return self.name
