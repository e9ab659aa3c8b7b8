import logging
import os

from django.db import connection
from django.http import FileResponse, HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from .models import Country
from .serializers import CountrySerializer, RefreshedCountrySerializer, StatusSerializer, collect_errors
from . import services, utils

logger = logging.getLogger(__name__)

NOT_FOUND = {"error": "Country not found"}


def server_error():
    return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@api_view(['POST'])
def refresh_countries(request):
    """
    POST /countries/refresh
    Fetch countries and exchange rates, replace the cached table and
    regenerate the summary image. Returns the freshly stored rows.
    """
    try:
        created = services.refresh_countries()
    except utils.ExternalAPIError as e:
        logger.warning("Refresh aborted: %s", e)
        return Response(
            {"error": "External data source unavailable", "details": f"Could not fetch data from {e.source}"},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    except Exception:
        logger.exception("Error refreshing countries")
        return server_error()

    return Response(RefreshedCountrySerializer(created, many=True).data, status=status.HTTP_200_OK)


@api_view(['GET'])
def list_countries(request):
    """
    GET /countries
    Filters:
      - ?region=Africa (case-insensitive)
      - ?currency=NGN (case-insensitive)
    Sorting:
      - ?sort=gdp_asc or ?sort=gdp_desc, countries without GDP last
    Default:
      - Ordered by id ascending.
    """
    try:
        qs = Country.objects.filtered(
            region=request.query_params.get("region"),
            currency=request.query_params.get("currency"),
            sort=request.query_params.get("sort"),
        )
        return Response(CountrySerializer(qs, many=True).data)
    except Exception:
        logger.exception("Error fetching countries")
        return server_error()


@api_view(['GET', 'DELETE'])
def country_detail(request, name):
    """
    GET /countries/:name  -> 404 JSON if not found, 400 if the stored row is invalid
    DELETE /countries/:name -> delete, return 200 or 404
    """
    try:
        if request.method == 'DELETE':
            if Country.objects.delete_by_name(name) == 0:
                return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
            return Response(status=status.HTTP_200_OK)

        country = Country.objects.find_by_name(name)
        if country is None:
            return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)

        data = CountrySerializer(country).data
        errors = collect_errors(data, "lookup")
        if errors:
            return Response({"error": "Validation failed", "details": errors}, status=status.HTTP_400_BAD_REQUEST)
        return Response(data)
    except Exception:
        logger.exception("Error handling %s /countries/%s", request.method, name)
        return server_error()


@api_view(['GET'])
def get_status(request):
    """
    GET /status -> { total_countries, last_refreshed_at }
    last_refreshed_at is taken as the max(last_refreshed_at) across records (or null)
    """
    try:
        return Response(StatusSerializer(Country.objects.status_summary()).data)
    except Exception:
        logger.exception("Error reading status")
        return server_error()


@api_view(['GET'])
def get_summary_image(request):
    """
    GET /countries/image
    Serve the summary image at cache/summary.png (or utils.get_summary_image_path()).
    If not found, return a JSON 404.
    """
    path = utils.get_summary_image_path()
    if not os.path.exists(path):
        return Response({"error": "Summary image not found"}, status=status.HTTP_404_NOT_FOUND)
    return FileResponse(open(path, 'rb'), content_type='image/png')


# --- maintenance endpoints ---------------------------------------------------

@api_view(['GET'])
def insert_test_country(request):
    """GET /test -> insert one hardcoded row to prove the database is writable."""
    try:
        Country.objects.insert_one(
            name="Nigeria",
            capital="Abuja",
            region="Africa",
            population=20000000,
            flag_url="https://flagcdn.com/ng.svg",
            currency_code="NGN",
        )
    except Exception:
        logger.exception("Error inserting test country")
        return server_error()
    return HttpResponse("Database connection successful.", content_type="text/plain")


@api_view(['GET'])
def check_database(request):
    """GET /check -> dump the whole table, then close the database connection."""
    try:
        data = CountrySerializer(Country.objects.list_all(), many=True).data
        connection.close()
    except Exception:
        logger.exception("Error checking database")
        return server_error()
    return Response(data)


@api_view(['GET'])
def setup_schema(request):
    """GET /setup -> drop and recreate the countries table."""
    try:
        Country.objects.drop_schema()
        Country.objects.create_schema()
    except Exception:
        logger.exception("Error recreating countries table")
        return server_error()
    logger.info("Countries table recreated")
    return Response({"message": "Countries table created"})


@api_view(['GET'])
def clear_countries(request):
    """GET /clear -> remove every stored country."""
    try:
        deleted = Country.objects.truncate()
    except Exception:
        logger.exception("Error clearing countries")
        return server_error()
    logger.info("Cleared %d countries", deleted)
    return Response({"message": "Countries table cleared", "deleted": deleted})
