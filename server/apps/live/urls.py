from django.urls import path

from server.apps.live.views import event_stream

urlpatterns = [
    path('events', event_stream, name='live-events'),
]
