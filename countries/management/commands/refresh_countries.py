from django.core.management.base import BaseCommand, CommandError

from countries import services, utils


class Command(BaseCommand):
    help = "Refresh cached countries from the upstream APIs and regenerate the summary image."

    def add_arguments(self, parser):
        parser.add_argument(
            "--image-only",
            action="store_true",
            help="Only re-render the summary image from the stored countries.",
        )

    def handle(self, *args, **options):
        if options["image_only"]:
            path = services.regenerate_summary_image()
            self.stdout.write(self.style.SUCCESS(f"Summary image written to {path}"))
            return

        try:
            created = services.refresh_countries()
        except utils.ExternalAPIError as e:
            raise CommandError(str(e)) from e

        self.stdout.write(self.style.SUCCESS(f"Refreshed {len(created)} countries"))
