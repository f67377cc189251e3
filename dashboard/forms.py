from django import forms

from accounts.forms import PHONE_MIN_LENGTH
from accounts.models import Owner
from booking.models import Court
from booking.serializers import HOUR_LABEL_RE


class CourtForm(forms.ModelForm):
    class Meta:
        model = Court
        fields = ['name', 'sport_type', 'price_per_hour', 'availability', 'is_active']

    def clean_price_per_hour(self):
        price = self.cleaned_data['price_per_hour']
        if price < 0:
            raise forms.ValidationError("Price cannot be negative.")
        return price


class ProfileForm(forms.ModelForm):
    phone = forms.CharField(min_length=PHONE_MIN_LENGTH, max_length=30)

    class Meta:
        model = Owner
        fields = ['name', 'phone']


class EstablishmentForm(forms.ModelForm):
    class Meta:
        model = Owner
        fields = ['establishment_name', 'city']


class ManualReservationForm(forms.Form):
    """Reservation typed in by the owner, e.g. for a phone booking."""
    court_id = forms.UUIDField()
    date = forms.DateField(input_formats=["%Y-%m-%d"])
    time = forms.CharField(max_length=5)
    client_name = forms.CharField(max_length=160, required=False)

    def clean_time(self):
        value = self.cleaned_data['time'].strip()
        if not HOUR_LABEL_RE.match(value):
            raise forms.ValidationError("Use a whole hour label such as 08:00.")
        return value
