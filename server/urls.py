"""Root URL configuration.

Only the live update stream is exposed over HTTP here; folder and file
management goes through the logic layer and the admin site.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('api/', include('server.apps.live.urls')),
    path('admin/', admin.site.urls),
]
